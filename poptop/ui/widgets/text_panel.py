"""Pane view showing a pre-formatted text panel."""

from typing import Any

from rich.markup import escape
from textual.widgets import Static

from ...charts import TextHandle


class TextPanelView(Static):
    """Text pane bound to a cached TextHandle."""

    DEFAULT_CSS = """
    TextPanelView {
        border: round $primary;
        border-title-color: $text;
        width: 1fr;
        height: 1fr;
        overflow: hidden;
    }
    """

    def __init__(self, panel: TextHandle, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.panel = panel
        self.drawn_version = -1

    def on_mount(self):
        self.border_title = self.panel.title

    def refresh_if_changed(self) -> bool:
        if self.panel.version == self.drawn_version:
            return False
        self.refresh()
        return True

    def render(self) -> str:
        self.drawn_version = self.panel.version
        if not self.panel.text:
            return "[dim]No data available[/dim]"
        # Process names are untrusted and may contain markup
        return escape(self.panel.text.rstrip("\n"))
