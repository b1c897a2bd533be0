"""Sample commands."""

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import click

from zivid_samples.cameras.core.models import CaptureSettings
from zivid_samples.cli.core.logger import ClickLogger
from zivid_samples.cli.utils.display import print_capture_summary, print_multi_camera_statistics
from zivid_samples.core.exceptions import ObjectModelError
from zivid_samples.samples.capture_halcon import WRITERS, CaptureHalconViaZivid
from zivid_samples.samples.multi_camera import MultiCameraCaptureInParallel

T = TypeVar("T")

BACKENDS = {"zivid": "Zivid", "mock": "MockZivid"}

backend_option = click.option(
    "--backend",
    type=click.Choice(sorted(BACKENDS)),
    default=None,
    help="Camera backend (default: ZIVID_SAMPLES_CAMERA__BACKEND)",
)
no_pause_option = click.option(
    "--no-pause", is_flag=True, help="Exit immediately on error instead of waiting for enter"
)


def _backend_type(backend: Optional[str]) -> Optional[str]:
    return BACKENDS[backend] if backend else None


def run_sample(factory: Callable[[], Awaitable[T]], no_pause: bool) -> T:
    """Run a sample coroutine, reporting failures the way the samples always have.

    Object model errors print their message and exit with status 1. Any other error additionally prints
    ``Press enter to exit.`` and waits for a line on stdin unless ``no_pause`` is set.
    """
    logger = ClickLogger()
    try:
        return asyncio.run(factory())
    except ObjectModelError as e:
        logger.error(e.error_message)
        sys.exit(1)
    except Exception as e:
        logger.error(str(e))
        click.echo("Press enter to exit.")
        if not no_pause:
            sys.stdin.readline()
        sys.exit(1)


@click.command("capture-halcon")
@click.option("--camera", "camera_name", default=None, help="Camera to open, 'Backend:serial' or a serial number")
@backend_option
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML capture settings (default: f/5.66, 8333 us, outlier removal and smoothing)",
)
@click.option(
    "--frames", type=int, default=None, help="Number of frames (default: ZIVID_SAMPLES_CAPTURE__HALCON_FRAMES)"
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output PLY file (default: ZIVID_SAMPLES_CAPTURE__OUTPUT_FILE)",
)
@click.option(
    "--writer", type=click.Choice(WRITERS), default=None, help="Write through HALCON or directly with plyfile"
)
@click.option(
    "--invert-normals/--no-invert-normals",
    default=None,
    help="Write inverted normals (default: ZIVID_SAMPLES_CAPTURE__INVERT_NORMALS)",
)
@click.option("--skip-license-check", is_flag=True, help="Do not time a HALCON license query first")
@no_pause_option
def capture_halcon(
    camera_name: Optional[str],
    backend: Optional[str],
    settings_path: Optional[Path],
    frames: Optional[int],
    output_path: Optional[Path],
    writer: Optional[str],
    invert_normals: Optional[bool],
    skip_license_check: bool,
    no_pause: bool,
):
    """Capture point clouds and save them through a HALCON 3D object model."""
    logger = ClickLogger()

    backend_type = _backend_type(backend)
    if backend_type and (camera_name is None or ":" not in camera_name):
        camera_name = f"{backend_type}:{camera_name or ''}"

    async def run():
        settings = CaptureSettings.load(settings_path) if settings_path else CaptureSettings()
        sample = CaptureHalconViaZivid(
            camera_name=camera_name,
            settings=settings,
            frames=frames,
            output_path=output_path,
            writer=writer,
            check_license=not skip_license_check,
            invert_normals=invert_normals,
        )
        return await sample.run()

    summary = run_sample(run, no_pause)
    print_capture_summary(summary)
    logger.success(f"Saved {summary.frames_written} frames to {summary.output_path}")


@click.command("multi-camera")
@backend_option
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML 3D settings (default: ZIVID_SAMPLES_CAPTURE__SETTINGS_FILE)",
)
@click.option(
    "--settings-2d",
    "settings_2d_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML 2D settings (default: ZIVID_SAMPLES_CAPTURE__SETTINGS_2D_FILE)",
)
@click.option(
    "--frames", type=int, default=None, help="Measurement rounds (default: ZIVID_SAMPLES_CAPTURE__MULTI_CAMERA_FRAMES)"
)
@click.option(
    "--warmup-rounds", type=int, default=None, help="Warmup rounds (default: ZIVID_SAMPLES_CAPTURE__WARMUP_ROUNDS)"
)
@click.option("--table/--no-table", default=True, help="Also print the averages as tables")
@no_pause_option
def multi_camera(
    backend: Optional[str],
    settings_path: Optional[Path],
    settings_2d_path: Optional[Path],
    frames: Optional[int],
    warmup_rounds: Optional[int],
    table: bool,
    no_pause: bool,
):
    """Benchmark parallel 2D and 3D captures on every connected camera."""

    async def run():
        sample = MultiCameraCaptureInParallel(
            backend=_backend_type(backend),
            settings_path=settings_path,
            settings_2d_path=settings_2d_path,
            frames=frames,
            warmup_rounds=warmup_rounds,
        )
        return await sample.run()

    result = run_sample(run, no_pause)
    for line in result.report():
        click.echo(line)
    if table:
        click.echo("")
        print_multi_camera_statistics(result)
