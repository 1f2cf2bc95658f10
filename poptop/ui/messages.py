"""Messages for UI event communication."""

from textual.message import Message

from ..config import WidgetId


class PanesRebuilt(Message):
    """Message posted after the pane layout has been rebuilt.

    Attributes:
        widget_ids: The widgets now on screen, in display order.
    """

    def __init__(self, widget_ids: list[WidgetId]) -> None:
        self.widget_ids = widget_ids
        super().__init__()


class SamplerFailed(Message):
    """Message posted when a sampler's metric source fails.

    Attributes:
        sampler_name: Name of the failed sampler.
        error: The exception raised by the metric source.
    """

    def __init__(self, sampler_name: str, error: Exception) -> None:
        self.sampler_name = sampler_name
        self.error = error
        super().__init__()
