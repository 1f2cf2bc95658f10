"""poptop - a terminal dashboard that charts local system metrics over time."""

__version__ = "0.1.0"
