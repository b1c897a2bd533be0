"""Core CLI functionality."""

from .logger import ClickLogger, setup_logger

__all__ = ["ClickLogger", "setup_logger"]
