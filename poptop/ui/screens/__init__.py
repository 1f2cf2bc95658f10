"""Screen __init__ for easy imports."""

from .help import HelpScreen

__all__ = ["HelpScreen"]
