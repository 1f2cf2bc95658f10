"""Dashboard configuration: which widgets to show and how to sample them."""

import logging
import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from .layout import Orientation
from .monitor import SamplerSettings
from .validation import (
    WIDGET_NAMES,
    ValidationResult,
    validate_chart_duration,
    validate_flag,
    validate_orientation,
    validate_positive_count,
    validate_redraw_interval,
    validate_sample_interval,
    validate_smoothing_window,
    validate_widget_name,
)

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration value is invalid."""


class WidgetId(IntEnum):
    """Stable identifier of each widget kind."""

    LOAD = 0
    CPU = 1
    NETWORK = 2
    DISK_IOPS = 3
    DISK_IO = 4
    TOP_CPU = 5
    TOP_MEM = 6

    @property
    def label(self) -> str:
        return WIDGET_NAMES[self.value]

    @classmethod
    def from_name(cls, name: str) -> "WidgetId":
        _check(validate_widget_name(name))
        return cls(WIDGET_NAMES.index(name.strip().lower()))


DEFAULT_WIDGETS = [WidgetId.LOAD, WidgetId.CPU, WidgetId.NETWORK, WidgetId.DISK_IOPS]


def _check(result: ValidationResult) -> None:
    if not result.valid:
        raise ConfigError(result.error_message)


@dataclass
class DashboardConfig:
    """Single-owner configuration mutated only by the dashboard driver.

    Samplers never read this object directly; they receive an immutable
    ``SamplerSettings`` snapshot instead.
    """

    # Display order of the widgets
    widgets: list[WidgetId] = field(default_factory=lambda: list(DEFAULT_WIDGETS))

    # Seconds between full repaints
    redraw_interval: float = 0.5

    # Seconds between samples
    sample_interval: float = 0.5

    # Width of each chart's x-axis in seconds
    chart_duration: float = 120.0

    # Raw samples averaged into one display point
    smoothing_samples: int = 4

    # Lines shown in the top process lists
    top_rows: int = 25

    tile: bool = False
    orientation: Orientation = Orientation.STACKED

    # Set once a widget is explicitly selected; the defaults are then dropped
    select_widgets_mode: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check every value.

        Raises:
            ConfigError: If any value is out of range
        """
        _check(validate_redraw_interval(self.redraw_interval))
        _check(validate_sample_interval(self.sample_interval))
        _check(validate_chart_duration(self.chart_duration))
        _check(validate_positive_count(self.smoothing_samples, "Smoothing samples"))
        _check(validate_smoothing_window(self.smoothing_samples, self.num_samples))
        _check(validate_positive_count(self.top_rows, "Top rows"))
        _check(validate_flag(self.tile, "Tile"))
        if not isinstance(self.orientation, Orientation):
            _check(validate_orientation(self.orientation))
            self.orientation = Orientation(self.orientation.strip().lower())
        self.widgets = [WidgetId(w) for w in self.widgets]

    @property
    def num_samples(self) -> int:
        """Samples retained per series: chart duration over sample interval."""
        return max(1, math.ceil(self.chart_duration / self.sample_interval))

    def sampler_settings(self) -> SamplerSettings:
        return SamplerSettings(
            sample_interval=self.sample_interval,
            num_samples=self.num_samples,
            smoothing_samples=self.smoothing_samples,
            top_rows=self.top_rows,
        )

    def select_widget(self, widget_id: WidgetId) -> None:
        """Explicitly add a widget; the first call replaces the defaults."""
        if not self.select_widgets_mode:
            self.select_widgets_mode = True
            self.widgets = []
        self.widgets.append(WidgetId(widget_id))

    def toggle_widget(self, widget_id: WidgetId) -> bool:
        """Show or hide a widget.

        Returns:
            True if the widget is now shown
        """
        widget_id = WidgetId(widget_id)
        if widget_id in self.widgets:
            self.widgets.remove(widget_id)
            logger.info(f"Widget '{widget_id.label}' hidden, {len(self.widgets)} remaining")
            return False

        self.widgets.append(widget_id)
        logger.info(f"Widget '{widget_id.label}' shown, {len(self.widgets)} total")
        return True

    def toggle_tile(self) -> bool:
        self.tile = not self.tile
        logger.info(f"Tile mode: {self.tile}")
        return self.tile

    def toggle_orientation(self) -> Orientation:
        self.orientation = self.orientation.flipped()
        logger.info(f"Split orientation: {self.orientation.value}")
        return self.orientation

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "DashboardConfig":
        """Build a configuration from parsed YAML.

        Expected sections (all optional)::

            widgets: [load, cpu, network]
            sampling:
              sample_interval: 0.5
              chart_duration: 120
              smoothing_samples: 4
              top_rows: 25
            display:
              redraw_interval: 0.5
              tile: false
              orientation: stacked

        Raises:
            ConfigError: If a section has the wrong shape or a value is invalid
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")

        sampling = data.get("sampling") or {}
        display = data.get("display") or {}
        if not isinstance(sampling, dict) or not isinstance(display, dict):
            raise ConfigError("'sampling' and 'display' must be mappings")

        kwargs: dict[str, Any] = {}
        for key in ("sample_interval", "chart_duration", "smoothing_samples", "top_rows"):
            if key in sampling:
                kwargs[key] = sampling[key]
        for key in ("redraw_interval", "tile", "orientation"):
            if key in display:
                kwargs[key] = display[key]

        widgets = data.get("widgets")
        if widgets is not None:
            if not isinstance(widgets, list):
                raise ConfigError("'widgets' must be a list of widget names")
            kwargs["widgets"] = [WidgetId.from_name(name) for name in widgets]

        return cls(**kwargs)
