"""Command line interface for the zivid samples."""

from zivid_samples.cli.__main__ import cli, main

__all__ = ["cli", "main"]
