"""Pane view drawing a multi-series line chart from a ChartHandle."""

import logging
import math

from textual.widgets import Static

from ...charts import ChartHandle, ChartSeries
from ...series import finite

logger = logging.getLogger(__name__)

MARKER = "•"


def resample(values: list[float], width: int) -> list[float]:
    """Pick ``width`` evenly spaced values, always keeping the newest."""
    n = len(values)
    if n <= width:
        return list(values)
    return [values[((i + 1) * n) // width - 1] for i in range(width)]


def value_range(series: list[ChartSeries]) -> tuple[float, float] | None:
    """Y-axis bounds covering every real value, anchored at zero."""
    real = [v for s in series for v in finite(s.values)]
    if not real:
        return None
    low = min(0.0, min(real))
    high = max(real)
    if high <= low:
        high = low + 1.0
    return low, high


def plot_rows(series: list[ChartSeries], width: int, height: int, low: float, high: float) -> list[str]:
    """Draw the series into ``height`` rows of Rich markup.

    Later series are drawn over earlier ones where they share a cell.
    """
    grid: list[list[str | None]] = [[None] * width for _ in range(height)]
    for s in series:
        for col, value in enumerate(resample(s.values, width)):
            if not math.isfinite(value):
                continue
            row = round((value - low) / (high - low) * (height - 1))
            grid[height - 1 - row][col] = s.color

    rows = []
    for cells in grid:
        parts = []
        run_color: str | None = None
        run = ""
        for color in cells:
            if color != run_color and run:
                parts.append(f"[{run_color}]{run}[/]" if run_color else run)
                run = ""
            run_color = color
            run += MARKER if color else " "
        if run:
            parts.append(f"[{run_color}]{run}[/]" if run_color else run)
        rows.append("".join(parts))
    return rows


def chart_title(chart: ChartHandle) -> str:
    """Border title with the colour legend, e.g. ``CPU (%) (min, avg, max)``."""
    if not chart.legend:
        return chart.title
    legend = ", ".join(f"[{color}]{label}[/]" for label, color in chart.legend)
    return f"{chart.title} ({legend})"


class ChartView(Static):
    """Line chart pane bound to a cached ChartHandle.

    The view holds no data of its own, so it can be thrown away and rebuilt
    whenever the layout changes.
    """

    DEFAULT_CSS = """
    ChartView {
        border: round $primary;
        border-title-color: $text;
        width: 1fr;
        height: 1fr;
    }
    """

    def __init__(self, chart: ChartHandle, **kwargs):
        """Initialize chart view.

        Args:
            chart: Handle whose series are drawn on every refresh
        """
        super().__init__(**kwargs)
        self.chart = chart
        self.drawn_version = -1

    def on_mount(self):
        self.border_title = chart_title(self.chart)

    def refresh_if_changed(self) -> bool:
        """Repaint if the chart has new series since the last render."""
        if self.chart.version == self.drawn_version:
            return False
        self.refresh()
        return True

    def render(self) -> str:
        """Render the chart with y-axis labels and an x-axis."""
        self.drawn_version = self.chart.version
        series = list(self.chart.series.values())
        bounds = value_range(series)
        if bounds is None:
            return "[dim]No data available[/dim]"

        low, high = bounds
        fmt = self.chart.y_format
        label_width = max(len(fmt(high)), len(fmt(low)))

        width = self.content_size.width - label_width - 2
        height = self.content_size.height - 2
        if width < 1 or height < 1:
            return ""

        lines = []
        for i, row in enumerate(plot_rows(series, width, height, low, high)):
            if i == 0:
                label = fmt(high)
            elif i == height - 1:
                label = fmt(low)
            elif i == height // 2:
                label = fmt(low + (high - low) * (height - 1 - i) / max(1, height - 1))
            else:
                label = ""
            lines.append(f"[dim]{label:>{label_width}}[/dim] │{row}")

        lines.append(" " * label_width + " └" + "─" * width)

        labels = self.chart.x_labels
        if labels:
            left, right = labels[0], labels[-1]
            gap = max(1, width - len(left) - len(right))
            lines.append(" " * (label_width + 2) + f"[dim]{left}{' ' * gap}{right}[/dim]")

        return "\n".join(lines)
