"""Tests for the dashboard configuration."""

import pytest

from poptop.config import DEFAULT_WIDGETS, ConfigError, DashboardConfig, WidgetId
from poptop.layout import Orientation


def test_defaults():
    config = DashboardConfig()

    assert config.widgets == [WidgetId.LOAD, WidgetId.CPU, WidgetId.NETWORK, WidgetId.DISK_IOPS]
    assert config.redraw_interval == 0.5
    assert config.sample_interval == 0.5
    assert config.chart_duration == 120.0
    assert config.smoothing_samples == 4
    assert config.top_rows == 25
    assert not config.tile
    assert config.orientation is Orientation.STACKED


def test_defaults_are_not_shared():
    config = DashboardConfig()
    config.widgets.append(WidgetId.TOP_CPU)

    assert WidgetId.TOP_CPU not in DEFAULT_WIDGETS
    assert WidgetId.TOP_CPU not in DashboardConfig().widgets


def test_num_samples_from_duration():
    """Test that retention is chart duration over sample interval."""
    assert DashboardConfig().num_samples == 240
    assert DashboardConfig(chart_duration=10, sample_interval=3).num_samples == 4


def test_sampler_settings_snapshot():
    """Test that samplers get an immutable copy, unaffected by later changes."""
    config = DashboardConfig(sample_interval=1.0, chart_duration=60, smoothing_samples=2, top_rows=10)
    settings = config.sampler_settings()

    config.sample_interval = 2.0

    assert settings.sample_interval == 1.0
    assert settings.num_samples == 60
    assert settings.smoothing_samples == 2
    assert settings.top_rows == 10
    with pytest.raises(AttributeError):
        settings.sample_interval = 5.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"redraw_interval": 0.001},
        {"sample_interval": 0.0},
        {"chart_duration": -1},
        {"smoothing_samples": 0},
        {"top_rows": 0},
        {"orientation": "diagonal"},
        {"chart_duration": 2, "sample_interval": 1, "smoothing_samples": 4},
        {"tile": "false"},
    ],
)
def test_invalid_values_rejected(kwargs):
    """Test that construction errors are raised, never clamped."""
    with pytest.raises(ConfigError):
        DashboardConfig(**kwargs)


def test_orientation_from_string():
    config = DashboardConfig(orientation="Side-By-Side")

    assert config.orientation is Orientation.SIDE_BY_SIDE


def test_select_widget_replaces_defaults():
    """Test that the first explicit selection drops the default widgets."""
    config = DashboardConfig()

    config.select_widget(WidgetId.TOP_MEM)
    config.select_widget(WidgetId.CPU)

    assert config.select_widgets_mode
    assert config.widgets == [WidgetId.TOP_MEM, WidgetId.CPU]


def test_toggle_widget():
    config = DashboardConfig()

    assert config.toggle_widget(WidgetId.CPU) is False
    assert WidgetId.CPU not in config.widgets

    assert config.toggle_widget(WidgetId.CPU) is True
    assert config.widgets[-1] == WidgetId.CPU


def test_toggle_tile_and_orientation():
    config = DashboardConfig()

    assert config.toggle_tile() is True
    assert config.toggle_orientation() is Orientation.SIDE_BY_SIDE
    assert config.toggle_orientation() is Orientation.STACKED


def test_widget_id_names():
    assert WidgetId.DISK_IOPS.label == "disk-iops"
    assert WidgetId.from_name("top-mem") is WidgetId.TOP_MEM
    with pytest.raises(ConfigError):
        WidgetId.from_name("gpu")


def test_from_mapping():
    config = DashboardConfig.from_mapping(
        {
            "widgets": ["cpu", "top-cpu"],
            "sampling": {"sample_interval": 1, "chart_duration": 30, "smoothing_samples": 2, "top_rows": 10},
            "display": {"redraw_interval": 0.25, "tile": True, "orientation": "side-by-side"},
        }
    )

    assert config.widgets == [WidgetId.CPU, WidgetId.TOP_CPU]
    assert config.sample_interval == 1
    assert config.num_samples == 30
    assert config.smoothing_samples == 2
    assert config.top_rows == 10
    assert config.redraw_interval == 0.25
    assert config.tile
    assert config.orientation is Orientation.SIDE_BY_SIDE


def test_smoothing_window_may_fill_whole_chart():
    config = DashboardConfig(chart_duration=2, sample_interval=1, smoothing_samples=2)

    assert config.num_samples == config.smoothing_samples


def test_from_mapping_rejects_quoted_tile():
    """Test that a quoted "false" is not read as tile mode on."""
    with pytest.raises(ConfigError, match="Tile must be true or false"):
        DashboardConfig.from_mapping({"display": {"tile": "false"}})


def test_from_mapping_empty_uses_defaults():
    assert DashboardConfig.from_mapping(None) == DashboardConfig()
    assert DashboardConfig.from_mapping({}) == DashboardConfig()


@pytest.mark.parametrize(
    "data",
    [
        ["not", "a", "mapping"],
        {"widgets": "cpu"},
        {"widgets": ["gpu"]},
        {"sampling": ["sample_interval"]},
        {"sampling": {"sample_interval": "fast"}},
        {"display": {"orientation": "diagonal"}},
    ],
)
def test_from_mapping_invalid(data):
    with pytest.raises(ConfigError):
        DashboardConfig.from_mapping(data)
