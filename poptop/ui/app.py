"""Main TUI application: owns the redraw timer and keyboard-driven layout."""

import logging
import time
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.widget import Widget
from textual.widgets import Footer, Header, Static

from ..cache import WidgetCache
from ..charts import ChartHandle
from ..config import DashboardConfig, WidgetId
from ..layout import NoWidgetsError, Orientation, Split, layout
from ..monitor import Sampler
from .messages import PanesRebuilt, SamplerFailed
from .screens import HelpScreen
from .widgets import ChartView, StatusBar, TextPanelView

logger = logging.getLogger(__name__)


def build_view(node: Any) -> Widget:
    """Turn a layout tree into nested Textual containers and pane views."""
    if isinstance(node, Split):
        container_cls = Vertical if node.orientation is Orientation.STACKED else Horizontal
        return container_cls(build_view(node.first), build_view(node.second), classes="split")
    if isinstance(node, ChartHandle):
        return ChartView(node, classes="pane")
    return TextPanelView(node, classes="pane")


class DashboardApp(App[None]):
    """Main TUI application for the metrics dashboard."""

    TITLE = "poptop"

    CSS = """
    #dashboard {
        height: 1fr;
    }

    .split {
        width: 1fr;
        height: 1fr;
    }

    #empty {
        width: 100%;
        height: 1fr;
        content-align: center middle;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("escape", "quit", "Quit", show=False),
        Binding("1", "toggle_widget(0)", "Load", show=False),
        Binding("2", "toggle_widget(1)", "CPU", show=False),
        Binding("3", "toggle_widget(2)", "Net", show=False),
        Binding("4", "toggle_widget(3)", "IOPS", show=False),
        Binding("5", "toggle_widget(4)", "Disk", show=False),
        Binding("6", "toggle_widget(5)", "TopCPU", show=False),
        Binding("7", "toggle_widget(6)", "TopMem", show=False),
        Binding("t", "toggle_tile", "Tile", show=True),
        Binding("o", "toggle_orientation", "Orientation", show=True),
        Binding("question_mark", "show_help", "Help", show=True),
    ]

    def __init__(self, config: DashboardConfig, cache: WidgetCache, **kwargs):
        """Initialize the dashboard app.

        Args:
            config: Dashboard configuration, mutated only by this app
            cache: Widget cache used to resolve widget ids into handles
        """
        super().__init__(**kwargs)
        self.config = config
        self.cache = cache
        self.dashboard: Container | None = None
        self.status_bar: StatusBar | None = None
        self.layout_tree: Any = None
        self._last_rebuild: float | None = None
        logger.info(f"DashboardApp initialized with {len(config.widgets)} widgets")

    def compose(self) -> ComposeResult:
        """Compose the app layout."""
        yield Header(show_clock=True)
        self.dashboard = Container(id="dashboard")
        yield self.dashboard
        self.status_bar = StatusBar(id="status-bar")
        yield self.status_bar
        yield Footer()

    async def on_mount(self):
        """Build the initial layout and start the redraw timer."""
        logger.info(f"DashboardApp mounted, redraw every {self.config.redraw_interval}s")
        await self.rebuild_layout()
        self.set_interval(self.config.redraw_interval, self.redraw)

    def redraw(self) -> None:
        """Repaint the panes whose handles have changed since they were drawn."""
        for view in self.query(".pane"):
            view.refresh_if_changed()

    async def rebuild_layout(self) -> None:
        """Rebuild the pane tree from the current widget selection.

        Widgets already in the cache keep their sampler and history; only
        newly selected widgets are constructed.
        """
        if self.dashboard is None:
            return

        widget_ids = list(self.config.widgets)
        handles = self.cache.resolve_all(widget_ids)
        await self.dashboard.remove_children()

        try:
            self.layout_tree = layout(handles, tile=self.config.tile, orientation=self.config.orientation)
        except NoWidgetsError as e:
            logger.warning(f"Layout rebuild skipped: {e}")
            self.layout_tree = None
            await self.dashboard.mount(Static("No widgets selected, press 1-7 to add one", id="empty"))
            self.notify(str(e), severity="warning")
        else:
            await self.dashboard.mount(build_view(self.layout_tree))

        self._last_rebuild = time.time()
        self.post_message(PanesRebuilt(widget_ids))

    async def action_toggle_widget(self, index: int) -> None:
        """Show or hide one widget and rebuild the layout."""
        widget_id = WidgetId(index)
        shown = self.config.toggle_widget(widget_id)
        logger.info(f"User action: {'show' if shown else 'hide'} widget '{widget_id.label}'")
        await self.rebuild_layout()

    async def action_toggle_tile(self) -> None:
        self.config.toggle_tile()
        await self.rebuild_layout()

    async def action_toggle_orientation(self) -> None:
        self.config.toggle_orientation()
        await self.rebuild_layout()

    def action_show_help(self) -> None:
        logger.info("User action: show help")
        self.push_screen(HelpScreen())

    def report_sampler_failure(self, sampler: Sampler, error: Exception) -> None:
        """Failure callback handed to the widget cache."""
        self.post_message(SamplerFailed(sampler.name, error))

    def on_panes_rebuilt(self, message: PanesRebuilt) -> None:
        self._update_status_bar(len(message.widget_ids))

    def on_sampler_failed(self, message: SamplerFailed) -> None:
        """A metric source failure is unrecoverable: shut down."""
        logger.error(f"Sampler '{message.sampler_name}' failed, shutting down: {message.error}")
        self.exit(return_code=1, message=f"poptop: {message.sampler_name} metrics unavailable: {message.error}")

    def _update_status_bar(self, widget_count: int) -> None:
        if not self.status_bar:
            return

        self.status_bar.update_stats(
            widgets=widget_count,
            samplers=len(self.cache.samplers),
            tile=self.config.tile,
            orientation=self.config.orientation.value,
            sample_interval=self.config.sample_interval,
            smoothing_samples=self.config.smoothing_samples,
            rebuild_time=self._last_rebuild,
        )
