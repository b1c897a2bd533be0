"""Runnable capture samples."""

from zivid_samples.samples.capture_halcon import CaptureHalconViaZivid, CaptureSummary
from zivid_samples.samples.multi_camera import (
    SETTINGS_TEMPLATE_DIR,
    CameraStatistics,
    MultiCameraCaptureInParallel,
    MultiCameraResult,
    compute_statistics,
)

__all__ = [
    "CaptureHalconViaZivid",
    "CaptureSummary",
    "MultiCameraCaptureInParallel",
    "MultiCameraResult",
    "CameraStatistics",
    "compute_statistics",
    "SETTINGS_TEMPLATE_DIR",
]
