"""Custom status bar showing the current dashboard settings."""

import logging
from datetime import datetime

from textual.widgets import Static

logger = logging.getLogger(__name__)


class StatusBar(Static):
    """Custom status bar showing dashboard settings."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs):
        """Initialize status bar."""
        super().__init__(**kwargs)
        self.widget_count = 0
        self.sampler_count = 0
        self.tile = False
        self.orientation = "stacked"
        self.sample_interval = 0.0
        self.smoothing_samples = 1
        self.last_rebuild = ""
        self._status_text = "Initializing..."
        logger.info("StatusBar initialized")

    def update_stats(
        self,
        widgets: int,
        samplers: int,
        tile: bool,
        orientation: str,
        sample_interval: float,
        smoothing_samples: int,
        rebuild_time: float | None = None,
    ):
        """Update status bar statistics.

        Args:
            widgets: Number of widgets on screen
            samplers: Number of live samplers, including hidden cached widgets
            tile: Whether tile mode is on
            orientation: Base split orientation name
            sample_interval: Seconds between samples
            smoothing_samples: Moving average window
            rebuild_time: Timestamp of the last layout rebuild
        """
        self.widget_count = widgets
        self.sampler_count = samplers
        self.tile = tile
        self.orientation = orientation
        self.sample_interval = sample_interval
        self.smoothing_samples = smoothing_samples

        if rebuild_time:
            self.last_rebuild = datetime.fromtimestamp(rebuild_time).strftime("%H:%M:%S")
        else:
            self.last_rebuild = "--:--:--"

        logger.info(f"StatusBar updated: widgets={widgets}, samplers={samplers}, tile={tile}, orientation={orientation}")
        self.refresh_display()

    def refresh_display(self):
        """Refresh the status bar display."""
        widget_color = "green" if self.widget_count else "red"
        tile_text = "[green]on[/green]" if self.tile else "[dim]off[/dim]"

        self._status_text = (
            f"Widgets: [{widget_color}]{self.widget_count}[/{widget_color}] "
            f"([dim]{self.sampler_count} sampling[/dim]) │ "
            f"Tile: {tile_text} │ "
            f"Split: {self.orientation} │ "
            f"Sample: {self.sample_interval * 1000:.0f}ms, avg {self.smoothing_samples} │ "
            f"Layout: [dim]{self.last_rebuild}[/dim]"
        )

        self.update(self._status_text)

    def render(self) -> str:
        """Render the status bar."""
        return self._status_text
