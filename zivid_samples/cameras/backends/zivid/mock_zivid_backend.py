"""Mock Zivid backend for testing without hardware."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from zivid_samples.cameras.backends.camera_backend import CameraBackend
from zivid_samples.cameras.core.models import CameraInfo
from zivid_samples.core.exceptions import CameraNotFoundError


@dataclass
class _MockFrame:
    number: int
    xyz: np.ndarray
    rgba: np.ndarray
    normals: np.ndarray


@dataclass
class _MockFrame2D:
    number: int
    rgba: np.ndarray


class _MockPointCloud:
    def __init__(self, frame: _MockFrame, processing_delay_s: float):
        self.frame = frame
        self._processing_delay_s = processing_delay_s
        self.processed = False

    def wait_until_processed(self) -> None:
        if not self.processed:
            time.sleep(self._processing_delay_s)
            self.processed = True


class MockZividBackend(CameraBackend):
    """Mock backend for Zivid cameras for testing.

    Generates a synthetic dome-shaped surface so that the sample pipelines can run end to end without a camera.
    Cells outside a centered disc have no surface (NaN points), and a thin ring at the edge of the disc has valid points
    but NaN normals, like the grazing-angle regions of a real capture.

    The number of mock devices and the grid size come from ``ZIVID_SAMPLES_CAMERA`` in the settings.

    Usage:
        >>> backend = MockZividBackend(serial_number="MOCK001")
        >>> await backend.initialize()
        >>> cloud = await backend.capture_point_cloud(CaptureSettings())
        >>> print(cloud.num_valid_points)
        >>> await backend.close()
    """

    def __init__(
        self,
        serial_number: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        capture_delay_s: float = 0.005,
        processing_delay_s: float = 0.002,
        op_timeout_s: Optional[float] = None,
        **kwargs,
    ):
        """Initialize mock Zivid backend.

        Args:
            serial_number: Serial number of mock device. If None, uses the first mock device.
            width: Width of generated grids, defaults to ``MOCK_WIDTH``
            height: Height of generated grids, defaults to ``MOCK_HEIGHT``
            capture_delay_s: Simulated duration of each capture
            processing_delay_s: Simulated duration of point cloud processing
            op_timeout_s: Timeout for operations
        """
        super().__init__(serial_number=serial_number, op_timeout_s=op_timeout_s, **kwargs)

        camera_config = self.config.ZIVID_SAMPLES_CAMERA
        if self.serial_number is None:
            self.serial_number = self._serial_for(1)
        self._width = width or camera_config.MOCK_WIDTH
        self._height = height or camera_config.MOCK_HEIGHT
        self._capture_delay_s = capture_delay_s
        self._processing_delay_s = processing_delay_s

        self._frame_counter = 0
        self._xyz: Optional[np.ndarray] = None
        self._rgba: Optional[np.ndarray] = None
        self._normals: Optional[np.ndarray] = None

    @staticmethod
    def _serial_for(index: int) -> str:
        return f"MOCK{index:03d}"

    @classmethod
    def discover(cls) -> List[str]:
        """Discover available mock devices.

        Returns:
            List of serial numbers for mock devices
        """
        return [device["serial_number"] for device in cls.discover_detailed()]

    @classmethod
    def discover_detailed(cls) -> List[Dict[str, str]]:
        """Discover mock devices with model and firmware information."""
        count = cls.config.ZIVID_SAMPLES_CAMERA.MOCK_CAMERA_COUNT
        return [
            {"serial_number": cls._serial_for(i), "model_name": "Zivid 2+ M130 (mock)", "firmware_version": "mock"}
            for i in range(1, count + 1)
        ]

    @classmethod
    async def discover_async(cls) -> List[str]:
        """Async wrapper for discover()."""
        return cls.discover()

    def _generate_surface(self) -> None:
        h, w = self._height, self._width
        rows, cols = np.mgrid[:h, :w].astype(np.float32)
        cy, cx = (h - 1) / 2.0, (w - 1) / 2.0
        r = np.sqrt((cols - cx) ** 2 + (rows - cy) ** 2)
        radius = min(h, w) * 0.45

        # Dome: 1000 mm away at the edge, bulging 200 mm towards the camera at the center
        z = 1000.0 - 200.0 * np.cos(np.clip(r / radius, 0.0, 1.0) * np.pi / 2.0)
        xyz = np.stack([(cols - cx) * 0.5, (rows - cy) * 0.5, z], axis=-1).astype(np.float32)
        xyz[r > radius] = np.nan

        normals = np.zeros((h, w, 3), dtype=np.float32)
        normals[:, :, 2] = -1.0
        normals[(r > radius * 0.95)] = np.nan

        rgba = np.empty((h, w, 4), dtype=np.uint8)
        rgba[:, :, 0] = (cols * 255.0 / max(w - 1, 1)).astype(np.uint8)
        rgba[:, :, 1] = (rows * 255.0 / max(h - 1, 1)).astype(np.uint8)
        rgba[:, :, 2] = 128
        rgba[:, :, 3] = 255

        self._xyz, self._rgba, self._normals = xyz, rgba, normals

    # =========================================================================
    # Blocking primitives
    # =========================================================================

    def _connect(self) -> CameraInfo:
        for device in self.discover_detailed():
            if device["serial_number"] == self.serial_number:
                self._generate_surface()
                self.logger.debug(f"Mock Zivid {self.serial_number}: {self._width}x{self._height} surface generated")
                return CameraInfo(
                    serial_number=device["serial_number"],
                    model_name=device["model_name"],
                    firmware_version=device["firmware_version"],
                    backend="MockZivid",
                )

        raise CameraNotFoundError(f"Mock Zivid camera '{self.serial_number}' not found")

    def _disconnect(self) -> None:
        self._xyz = self._rgba = self._normals = None

    def _capture_3d(self, sdk_settings: Any) -> _MockFrame:
        time.sleep(self._capture_delay_s)
        self._frame_counter += 1
        return _MockFrame(number=self._frame_counter, xyz=self._xyz, rgba=self._rgba, normals=self._normals)

    def _capture_2d(self, sdk_settings_2d: Any) -> _MockFrame2D:
        time.sleep(self._capture_delay_s)
        self._frame_counter += 1
        return _MockFrame2D(number=self._frame_counter, rgba=self._rgba)

    def _point_cloud(self, frame: _MockFrame) -> _MockPointCloud:
        return _MockPointCloud(frame, self._processing_delay_s)

    def _wait_until_processing_complete(self, point_cloud: _MockPointCloud) -> None:
        point_cloud.wait_until_processed()

    def _copy_points_xyz(self, point_cloud: _MockPointCloud) -> np.ndarray:
        point_cloud.wait_until_processed()
        return point_cloud.frame.xyz.copy()

    def _copy_colors_rgba(self, point_cloud: _MockPointCloud) -> np.ndarray:
        point_cloud.wait_until_processed()
        return point_cloud.frame.rgba.copy()

    def _copy_normals_xyz(self, point_cloud: _MockPointCloud) -> np.ndarray:
        point_cloud.wait_until_processed()
        return point_cloud.frame.normals.copy()

    def _copy_data_xyzrgba(self, point_cloud: _MockPointCloud) -> np.ndarray:
        point_cloud.wait_until_processed()
        return np.concatenate([point_cloud.frame.xyz, point_cloud.frame.rgba.astype(np.float32)], axis=-1)

    def _copy_image_rgba(self, frame_2d: _MockFrame2D) -> np.ndarray:
        return frame_2d.rgba.copy()

    @property
    def frame_count(self) -> int:
        """Number of 2D and 3D frames captured since construction."""
        return self._frame_counter

    @property
    def name(self) -> str:
        return f"MockZivid:{self.serial_number}"
