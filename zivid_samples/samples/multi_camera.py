"""Benchmark parallel 2D and 3D captures on every connected camera.

Each measurement round first captures one 2D frame on every camera at once, then one 3D frame on every camera at once.
A round does not start before every capture of the previous phase has returned, so the per-camera stage timings show
how much the cameras slow each other down when capturing together.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from zivid_samples.cameras.core.async_camera import AsyncCamera
from zivid_samples.cameras.core.models import Capture2DSettings, CaptureSettings
from zivid_samples.cameras.core.timing import Measured2DTimes, MeasuredTimes, average_times, format_duration
from zivid_samples.core import Component, ifnone

SETTINGS_TEMPLATE_DIR = Path(__file__).parent / "settings"


@dataclass
class CameraStatistics:
    """Average stage timings of one camera over all measurement rounds."""

    camera: str
    average_2d: Measured2DTimes
    average_3d: MeasuredTimes
    processing_measured: bool = True

    def line_2d(self) -> str:
        return (
            f"Average 2d capture time for camera {self.camera}: {format_duration(self.average_2d.capture)}"
            f" image time: {format_duration(self.average_2d.image_rgba)}"
            f" total time: {format_duration(self.average_2d.total)}"
        )

    def processing_time(self) -> str:
        return format_duration(self.average_3d.process) if self.processing_measured else "n/a"

    def line_3d(self) -> str:
        return (
            f"Average capture time for camera {self.camera}: {format_duration(self.average_3d.capture)}"
            f" point cloud time: {format_duration(self.average_3d.point_cloud)}"
            f" processing time: {self.processing_time()}"
            f" copy time: {format_duration(self.average_3d.copy)}"
            f" total time: {format_duration(self.average_3d.total)}"
        )


@dataclass
class MultiCameraResult:
    """Timings of a benchmark run.

    ``times_2d[i][j]`` and ``times_3d[i][j]`` hold round ``i`` of camera ``j``, cameras in discovery order.
    ``processing_measured[j]`` is False when camera ``j`` cannot time processing apart from the copy.
    """

    cameras: List[str]
    times_2d: List[List[Measured2DTimes]] = field(default_factory=list)
    times_3d: List[List[MeasuredTimes]] = field(default_factory=list)
    processing_measured: List[bool] = field(default_factory=list)
    statistics: List[CameraStatistics] = field(default_factory=list)

    def report(self) -> List[str]:
        """Report lines: all 2D averages, then all 3D averages."""
        return [stats.line_2d() for stats in self.statistics] + [stats.line_3d() for stats in self.statistics]


def compute_statistics(
    cameras: List[str],
    times_2d: List[List[Measured2DTimes]],
    times_3d: List[List[MeasuredTimes]],
    processing_measured: Optional[List[bool]] = None,
) -> List[CameraStatistics]:
    """Per-camera arithmetic means over all rounds.

    ``processing_measured`` holds one flag per camera and defaults to all True.

    Raises:
        ValueError: If there are no rounds
    """
    measured = processing_measured or [True] * len(cameras)
    return [
        CameraStatistics(
            camera=camera,
            average_2d=average_times([round_times[j] for round_times in times_2d]),
            average_3d=average_times([round_times[j] for round_times in times_3d]),
            processing_measured=measured[j],
        )
        for j, camera in enumerate(cameras)
    ]


class MultiCameraCaptureInParallel(Component):
    """Parallel capture benchmark over all cameras of a backend.

    Usage:
        >>> sample = MultiCameraCaptureInParallel(backend="MockZivid", frames=5, warmup_rounds=1)
        >>> result = await sample.run()
        >>> for line in result.report():
        ...     print(line)
    """

    def __init__(
        self,
        backend: Optional[str] = None,
        settings_path: Optional[Union[str, Path]] = None,
        settings_2d_path: Optional[Union[str, Path]] = None,
        frames: Optional[int] = None,
        warmup_rounds: Optional[int] = None,
        cameras: Optional[List[AsyncCamera]] = None,
        **kwargs,
    ):
        """Initialize the benchmark.

        Args:
            backend: Camera backend type (``Zivid`` or ``MockZivid``), defaults to the configured backend
            settings_path: 3D settings file, defaults to ``SETTINGS_FILE`` in the working directory
            settings_2d_path: 2D settings file, defaults to ``SETTINGS_2D_FILE`` in the working directory
            frames: Number of measurement rounds, defaults to ``MULTI_CAMERA_FRAMES``
            warmup_rounds: Number of warmup rounds, defaults to ``WARMUP_ROUNDS``
            cameras: Already opened cameras to use instead of discovering; they are left open after the run

        Raises:
            ValueError: If frames is less than 1 or warmup_rounds is negative
        """
        super().__init__(**kwargs)
        capture_config = self.config.ZIVID_SAMPLES_CAPTURE

        self.backend = backend
        self.settings_path = Path(ifnone(settings_path, default=capture_config.SETTINGS_FILE))
        self.settings_2d_path = Path(ifnone(settings_2d_path, default=capture_config.SETTINGS_2D_FILE))
        self.frames = ifnone(frames, default=capture_config.MULTI_CAMERA_FRAMES)
        self.warmup_rounds = ifnone(warmup_rounds, default=capture_config.WARMUP_ROUNDS)
        self._cameras = cameras

        if self.frames < 1:
            raise ValueError(f"Number of frames must be at least 1, got {self.frames}")
        if self.warmup_rounds < 0:
            raise ValueError(f"Number of warmup rounds must not be negative, got {self.warmup_rounds}")

    async def connect_cameras(self) -> List[AsyncCamera]:
        """Discover and connect every camera of the backend."""
        self.logger.info("Finding cameras")
        cameras = await AsyncCamera.open_all(self.backend)
        self.logger.info(f"Number of cameras found: {len(cameras)}")
        return cameras

    async def warmup(self, cameras: List[AsyncCamera], settings: CaptureSettings) -> None:
        """Run the warmup rounds, one 3D capture per camera per round."""
        self.logger.info("Warmup task")
        for _ in range(self.warmup_rounds):
            await asyncio.gather(*(camera.warmup(settings) for camera in cameras))

    async def measure(
        self, cameras: List[AsyncCamera], settings: CaptureSettings, settings_2d: Capture2DSettings
    ) -> MultiCameraResult:
        """Run the measurement rounds.

        Any capture failure propagates immediately and aborts the run.
        """
        result = MultiCameraResult(
            cameras=[camera.serial_number for camera in cameras],
            processing_measured=[camera.reports_processing_time for camera in cameras],
        )
        for i in range(self.frames):
            result.times_2d.append(list(await asyncio.gather(*(c.capture_2d_timed(settings_2d) for c in cameras))))
            result.times_3d.append(list(await asyncio.gather(*(c.capture_timed(settings) for c in cameras))))
            self.logger.debug(f"Round {i + 1}/{self.frames} done")
        return result

    @Component.autolog(
        log_level=logging.INFO,
        prefix_formatter=lambda function, args, kwargs: f"{function.__name__} started",
        suffix_formatter=lambda function, result: f"{function.__name__} completed for cameras {result.cameras}",
    )
    async def run(self) -> MultiCameraResult:
        """Connect, warm up, measure and compute per-camera averages.

        Raises:
            CameraNotFoundError: If no camera is found
            CameraConfigurationError: If a settings file is missing or invalid
            CameraError: If any capture fails
        """
        owns_cameras = self._cameras is None
        cameras = await self.connect_cameras() if owns_cameras else self._cameras
        try:
            settings = CaptureSettings.load(self.settings_path)
            settings_2d = Capture2DSettings.load(self.settings_2d_path)

            await self.warmup(cameras, settings)
            result = await self.measure(cameras, settings, settings_2d)
        finally:
            if owns_cameras:
                for camera in cameras:
                    await camera.close()

        self.logger.info("Generating statistics")
        result.statistics = compute_statistics(
            result.cameras, result.times_2d, result.times_3d, result.processing_measured
        )
        return result
