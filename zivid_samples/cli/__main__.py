"""Main entry point for the zivid-samples CLI."""

import sys

import click

from .commands import capture_halcon, multi_camera
from .core.logger import ClickLogger, setup_logger


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.version_option(package_name="zivid-samples", prog_name="zivid-samples")
@click.pass_context
def cli(ctx, verbose: bool):
    """Zivid samples - capture point clouds and benchmark multi-camera captures."""
    ctx.obj = setup_logger(verbose=verbose)


cli.add_command(capture_halcon)
cli.add_command(multi_camera)


def main():
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        logger = ClickLogger()
        logger.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
