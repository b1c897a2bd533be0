"""Display utilities for CLI output using Rich."""

from rich import box
from rich.console import Console
from rich.table import Table

from zivid_samples.cameras.core.timing import format_duration
from zivid_samples.samples.capture_halcon import CaptureSummary
from zivid_samples.samples.multi_camera import MultiCameraResult

console = Console()


def print_capture_summary(summary: CaptureSummary) -> None:
    """Print the result of a capture run with its average conversion times."""
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Camera", summary.camera)
    table.add_row("Writer", summary.writer)
    table.add_row("Frames written", str(summary.frames_written))
    table.add_row("Points (last frame)", str(summary.num_points))
    table.add_row("Output", str(summary.output_path))

    average = summary.average_conversion_times
    if average is not None:
        table.add_row("Average copy", format_duration(average.copy))
        if summary.writer == "halcon":
            table.add_row("Average tuples", format_duration(average.tuples))
            table.add_row("Average construct", format_duration(average.construct))
            table.add_row("Average mapping", format_duration(average.mapping))
            table.add_row("Average normals", format_duration(average.normals))
            table.add_row("Average colors", format_duration(average.colors))
        table.add_row("Average finalize", format_duration(average.finalize))

    console.print(table)


def print_multi_camera_statistics(result: MultiCameraResult) -> None:
    """Print per-camera average 2D and 3D stage timings as two tables."""
    if not result.statistics:
        console.print("No statistics to display.", style="yellow")
        return

    table_2d = Table(title="Average 2D capture times", box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table_2d.add_column("Camera", style="cyan", no_wrap=True)
    for column in ("Capture", "Image", "Total"):
        table_2d.add_column(column, justify="right")
    for stats in result.statistics:
        average = stats.average_2d
        table_2d.add_row(
            stats.camera,
            format_duration(average.capture),
            format_duration(average.image_rgba),
            format_duration(average.total),
        )

    table_3d = Table(title="Average 3D capture times", box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table_3d.add_column("Camera", style="cyan", no_wrap=True)
    for column in ("Capture", "Point cloud", "Processing", "Copy", "Total"):
        table_3d.add_column(column, justify="right")
    for stats in result.statistics:
        average = stats.average_3d
        table_3d.add_row(
            stats.camera,
            format_duration(average.capture),
            format_duration(average.point_cloud),
            stats.processing_time(),
            format_duration(average.copy),
            format_duration(average.total),
        )

    console.print(table_2d)
    console.print()
    console.print(table_3d)
