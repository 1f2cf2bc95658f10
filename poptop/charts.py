"""Render handles that samplers write into and pane views read from."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


def format_one_point(n: float) -> str:
    return f"{n:.1f}"


def format_no_point(n: float) -> str:
    return f"{n:.0f}"


def format_percent(n: float) -> str:
    return f"{n:.0f}%"


def format_labels(num_samples: int, sample_interval: float) -> list[str]:
    """X-axis labels in seconds for each sample slot."""
    return [f"{i * sample_interval:.0f}s" for i in range(num_samples)]


@dataclass
class ChartSeries:
    """One named line of a chart."""

    name: str
    values: list[float]
    color: str = "white"


@dataclass
class ChartHandle:
    """Latest display series of one line chart.

    Samplers replace whole series with ``set_series``, which bumps
    ``version``; views repaint only when the version has moved on.
    """

    title: str
    y_format: Callable[[float], str] = format_no_point
    legend: list[tuple[str, str]] = field(default_factory=list)
    series: dict[str, ChartSeries] = field(default_factory=dict)
    x_labels: list[str] = field(default_factory=list)
    version: int = 0

    def set_series(
        self,
        name: str,
        values: list[float],
        color: str = "white",
        x_labels: list[str] | None = None,
    ) -> None:
        """Replace (or add) the named series.

        Args:
            name: Series name; insertion order is drawing order
            values: Display-ready values, NaN where there is no data
            color: Rich colour for the line
            x_labels: Optional x-axis labels
        """
        self.series[name] = ChartSeries(name=name, values=list(values), color=color)
        if x_labels is not None:
            self.x_labels = list(x_labels)
        self.version += 1


@dataclass
class TextHandle:
    """Latest content of a pre-formatted text panel."""

    title: str
    text: str = ""
    version: int = 0

    def write(self, text: str) -> None:
        """Replace the panel content."""
        self.text = text
        self.version += 1
