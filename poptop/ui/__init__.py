"""TUI (Terminal User Interface) package for the metrics dashboard.

Public API:
    - DashboardApp: Main application class
    - ChartView: Pane view for line charts
    - TextPanelView: Pane view for text panels
    - PanesRebuilt: Message posted after the layout is rebuilt
    - SamplerFailed: Message posted when a metric source fails
"""

from .app import DashboardApp, build_view
from .messages import PanesRebuilt, SamplerFailed
from .widgets import ChartView, TextPanelView

__all__ = [
    "DashboardApp",
    "build_view",
    "ChartView",
    "TextPanelView",
    "PanesRebuilt",
    "SamplerFailed",
]
