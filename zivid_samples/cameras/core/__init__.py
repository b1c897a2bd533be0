"""Core camera interfaces and models."""

from zivid_samples.cameras.core.async_camera import AsyncCamera, discover_cameras
from zivid_samples.cameras.core.models import (
    AcquisitionSettings,
    CameraInfo,
    Capture2DSettings,
    CaptureSettings,
    PointCloudArrays,
)
from zivid_samples.cameras.core.timing import (
    ConversionTimes,
    Measured2DTimes,
    MeasuredTimes,
    Stopwatch,
    average_times,
    format_duration,
)

__all__ = [
    # Core classes
    "AsyncCamera",
    "discover_cameras",
    # Data models
    "AcquisitionSettings",
    "CaptureSettings",
    "Capture2DSettings",
    "CameraInfo",
    "PointCloudArrays",
    # Timing
    "MeasuredTimes",
    "Measured2DTimes",
    "ConversionTimes",
    "Stopwatch",
    "average_times",
    "format_duration",
]
