"""Logging configuration for the CLI."""

import logging
import sys
from typing import Iterable

import click

from zivid_samples.core.logger import ROOT_LOGGER_NAME


def setup_logger(
    name: str = "zivid-samples-cli",
    verbose: bool = False,
    forward: Iterable[str] = (ROOT_LOGGER_NAME,),
) -> logging.Logger:
    """Set up logger for the CLI.

    Args:
        name: Logger name
        verbose: Enable verbose logging
        forward: Package loggers whose records are also printed to the console at the CLI level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    console_handler.set_name("zivid-samples-cli-console")
    logger.addHandler(console_handler)

    for forwarded_name in forward:
        forwarded = logging.getLogger(forwarded_name)
        forwarded.handlers = [h for h in forwarded.handlers if h.get_name() != console_handler.get_name()]
        forwarded.addHandler(console_handler)

    return logger


class ClickLogger:
    """Logger that uses click.echo for output."""

    @staticmethod
    def success(message: str):
        """Log success message with green color."""
        click.echo(click.style(message, fg="green"))

    @staticmethod
    def error(message: str):
        """Log error message with red color."""
        click.echo(click.style(f"Error: {message}", fg="red"), err=True)
