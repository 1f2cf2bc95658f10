"""Widget __init__ for easy imports."""

from .chart_view import ChartView
from .status_bar import StatusBar
from .text_panel import TextPanelView

__all__ = [
    "ChartView",
    "StatusBar",
    "TextPanelView",
]
