"""Camera module for Zivid structured light 3D cameras.

Usage:
    >>> from zivid_samples.cameras import AsyncCamera, CaptureSettings
    >>>
    >>> async with await AsyncCamera.open() as camera:
    ...     cloud = await camera.capture_point_cloud(CaptureSettings())
    ...     print(cloud.num_valid_points)
"""

from zivid_samples.cameras.core import (
    AcquisitionSettings,
    AsyncCamera,
    CameraInfo,
    Capture2DSettings,
    CaptureSettings,
    ConversionTimes,
    Measured2DTimes,
    MeasuredTimes,
    PointCloudArrays,
    average_times,
    discover_cameras,
    format_duration,
)
from zivid_samples.cameras.backends import CameraBackend, MockZividBackend, ZividBackend

__all__ = [
    # High-level interfaces
    "AsyncCamera",
    "discover_cameras",
    # Data models
    "AcquisitionSettings",
    "CaptureSettings",
    "Capture2DSettings",
    "CameraInfo",
    "PointCloudArrays",
    "MeasuredTimes",
    "Measured2DTimes",
    "ConversionTimes",
    "average_times",
    "format_duration",
    # Backends
    "CameraBackend",
    "ZividBackend",
    "MockZividBackend",
]
