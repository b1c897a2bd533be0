"""CLI command modules."""

from zivid_samples.cli.commands.samples import capture_halcon, multi_camera

__all__ = ["capture_halcon", "multi_camera"]
