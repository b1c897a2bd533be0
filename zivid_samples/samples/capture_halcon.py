"""Capture point clouds with colors and normals, convert them to HALCON 3D object models and save them as PLY."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from zivid_samples.cameras.core.async_camera import AsyncCamera
from zivid_samples.cameras.core.models import CaptureSettings
from zivid_samples.cameras.core.timing import ConversionTimes, Stopwatch, average_times
from zivid_samples.core import Component, ifnone
from zivid_samples.halcon.conversion import compact_point_cloud
from zivid_samples.halcon.ply import write_ply

WRITERS = ("halcon", "ply")


@dataclass
class CaptureSummary:
    """Result of a capture run.

    Attributes:
        camera: Name of the camera that captured, ``Backend:serial``
        frames_written: Number of frames converted and saved
        num_points: Valid points in the last frame
        output_path: File the frames were written to, each frame overwrites the previous one
        writer: ``halcon`` or ``ply``
        conversion_times: Per-frame conversion stage durations
    """

    camera: str
    frames_written: int
    num_points: int
    output_path: Path
    writer: str
    conversion_times: List[ConversionTimes] = field(default_factory=list)

    @property
    def average_conversion_times(self) -> Optional[ConversionTimes]:
        return average_times(self.conversion_times) if self.conversion_times else None


class CaptureHalconViaZivid(Component):
    """Capture frames from one camera and save each as a point cloud file.

    With the ``halcon`` writer every frame goes through a HALCON 3D object model; the ``ply`` writer saves the same
    points with plyfile and needs no HALCON license.

    Usage:
        >>> sample = CaptureHalconViaZivid(camera_name="MockZivid:MOCK001", writer="ply", frames=3)
        >>> summary = await sample.run()
        >>> print(summary.num_points, summary.output_path)
    """

    def __init__(
        self,
        camera_name: Optional[str] = None,
        settings: Optional[CaptureSettings] = None,
        frames: Optional[int] = None,
        output_path: Optional[Union[str, Path]] = None,
        writer: Optional[str] = None,
        check_license: bool = True,
        invert_normals: Optional[bool] = None,
        **kwargs,
    ):
        """Initialize the capture sample.

        Args:
            camera_name: Camera to open, ``Backend:serial``; first available camera of the configured backend if None
            settings: Capture settings, the sample defaults if None
            frames: Number of frames, defaults to ``HALCON_FRAMES``
            output_path: Output file, defaults to ``OUTPUT_FILE`` in the working directory
            writer: ``halcon`` or ``ply``, defaults to ``WRITER``
            check_license: Time a HALCON license query before connecting (``halcon`` writer only)
            invert_normals: Write inverted normals, defaults to ``INVERT_NORMALS``

        Raises:
            ValueError: If the writer is unknown or frames is negative
        """
        super().__init__(**kwargs)
        capture_config = self.config.ZIVID_SAMPLES_CAPTURE

        self.camera_name = camera_name
        self.settings = ifnone(settings, default=CaptureSettings())
        self.frames = ifnone(frames, default=capture_config.HALCON_FRAMES)
        self.output_path = Path(ifnone(output_path, default=capture_config.OUTPUT_FILE))
        self.writer = ifnone(writer, default=capture_config.WRITER).lower()
        self.check_license = check_license
        self.invert_normals = ifnone(invert_normals, default=capture_config.INVERT_NORMALS)

        if self.writer not in WRITERS:
            raise ValueError(f"Unknown writer '{self.writer}', expected one of {WRITERS}")
        if self.frames < 0:
            raise ValueError(f"Number of frames must not be negative, got {self.frames}")

    async def run(self) -> CaptureSummary:
        """Run the capture loop.

        Raises:
            ObjectModelError: If HALCON fails
            CameraError: If connecting or capturing fails
        """
        model = None
        if self.writer == "halcon":
            from zivid_samples.halcon.object_model import HalconObjectModel

            model = HalconObjectModel()
            if self.check_license:
                model.check_license()

        self.logger.info("Connecting to camera")
        camera = await AsyncCamera.open(self.camera_name)

        summary = CaptureSummary(
            camera=camera.name, frames_written=0, num_points=0, output_path=self.output_path, writer=self.writer
        )
        async with camera:
            self.logger.info(f"Capturing {self.frames} frames to {self.output_path} with the {self.writer} writer")
            for i in range(self.frames):
                frame = await camera.capture(self.settings)

                watch = Stopwatch()
                cloud = await camera.copy_point_cloud(frame)
                copy_time = watch.lap()
                compacted = compact_point_cloud(cloud)
                compact_time = watch.lap()

                if model is not None:
                    times = model.from_point_cloud(compacted, copy_time=copy_time, compact_time=compact_time)
                    model.save(self.output_path, invert_normals=self.invert_normals)
                else:
                    write_ply(compacted, self.output_path, invert_normals=self.invert_normals)
                    times = ConversionTimes(copy=copy_time, tuples=compact_time, finalize=compact_time + watch.lap())

                summary.conversion_times.append(times)
                summary.frames_written += 1
                summary.num_points = compacted.num_points
                self.logger.debug(f"Frame {i + 1}/{self.frames}: {compacted.num_points} points")

        self.logger.info(f"Saved {summary.frames_written} frames to {self.output_path}")
        return summary
