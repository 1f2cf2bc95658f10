"""Validation utilities for dashboard configuration values."""

from typing import NamedTuple

# Sampling or redrawing faster than this is likely to stress the system
MIN_REDRAW_INTERVAL = 0.05
MIN_SAMPLE_INTERVAL = 0.02

WIDGET_NAMES = ("load", "cpu", "network", "disk-iops", "disk-io", "top-cpu", "top-mem")
ORIENTATION_NAMES = ("stacked", "side-by-side")


class ValidationResult(NamedTuple):
    """Result of a validation operation."""

    valid: bool
    error_message: str | None = None


def validate_redraw_interval(seconds: float) -> ValidationResult:
    """Validate the interval between full repaints.

    Args:
        seconds: Redraw interval in seconds

    Returns:
        ValidationResult indicating if the interval is acceptable
    """
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return ValidationResult(valid=False, error_message="Redraw interval must be a number")

    if seconds < MIN_REDRAW_INTERVAL:
        return ValidationResult(
            valid=False,
            error_message=f"Redraw interval of {seconds * 1000:.0f}ms is likely to stress the system "
                          f"(minimum {MIN_REDRAW_INTERVAL * 1000:.0f}ms)"
        )

    return ValidationResult(valid=True)


def validate_sample_interval(seconds: float) -> ValidationResult:
    """Validate the interval between metric samples.

    Args:
        seconds: Sample interval in seconds

    Returns:
        ValidationResult indicating if the interval is acceptable
    """
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return ValidationResult(valid=False, error_message="Sample interval must be a number")

    if seconds < MIN_SAMPLE_INTERVAL:
        return ValidationResult(
            valid=False,
            error_message=f"Sample interval of {seconds * 1000:.0f}ms is likely to stress the system "
                          f"(minimum {MIN_SAMPLE_INTERVAL * 1000:.0f}ms)"
        )

    return ValidationResult(valid=True)


def validate_chart_duration(seconds: float) -> ValidationResult:
    """Validate the time span shown on each chart's x-axis."""
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return ValidationResult(valid=False, error_message="Chart duration must be a number")

    if seconds <= 0:
        return ValidationResult(valid=False, error_message="Chart duration must be positive")

    return ValidationResult(valid=True)


def validate_positive_count(value: int, label: str) -> ValidationResult:
    """Validate a whole number that must be at least 1.

    Args:
        value: The count to validate
        label: Human readable name used in the error message

    Returns:
        ValidationResult indicating if the count is valid
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return ValidationResult(valid=False, error_message=f"{label} must be a whole number")

    if value < 1:
        return ValidationResult(valid=False, error_message=f"{label} must be at least 1")

    return ValidationResult(valid=True)


def validate_widget_name(name: str) -> ValidationResult:
    """Validate a widget name from the configuration file."""
    if not isinstance(name, str) or not name.strip():
        return ValidationResult(valid=False, error_message="Widget name cannot be empty")

    if name.strip().lower() not in WIDGET_NAMES:
        return ValidationResult(
            valid=False,
            error_message=f"Unknown widget '{name}' (choose from {', '.join(WIDGET_NAMES)})"
        )

    return ValidationResult(valid=True)


def validate_orientation(name: str) -> ValidationResult:
    """Validate a split orientation name."""
    if not isinstance(name, str) or name.strip().lower() not in ORIENTATION_NAMES:
        return ValidationResult(
            valid=False,
            error_message=f"Unknown orientation '{name}' (choose from {', '.join(ORIENTATION_NAMES)})"
        )

    return ValidationResult(valid=True)


def validate_smoothing_window(smoothing_samples: int, num_samples: int) -> ValidationResult:
    """Validate that the smoothing window fits inside the chart history.

    Args:
        smoothing_samples: Number of raw samples averaged into each point
        num_samples: Number of samples kept per series

    Returns:
        ValidationResult indicating if the window fits
    """
    if smoothing_samples > num_samples:
        return ValidationResult(
            valid=False,
            error_message=f"Smoothing over {smoothing_samples} samples exceeds the {num_samples} samples "
                          f"kept per chart (increase the duration or lower the smoothing)"
        )

    return ValidationResult(valid=True)


def validate_flag(value: bool, label: str) -> ValidationResult:
    """Validate an on/off setting, which must be a real boolean."""
    if not isinstance(value, bool):
        return ValidationResult(valid=False, error_message=f"{label} must be true or false, got {value!r}")

    return ValidationResult(valid=True)
