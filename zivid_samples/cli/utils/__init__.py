"""CLI utility functions."""

from .display import console, print_capture_summary, print_multi_camera_statistics

__all__ = ["console", "print_capture_summary", "print_multi_camera_statistics"]
