"""Zivid structured light camera backend using the zivid Python SDK.

This backend provides access to Zivid 3D cameras through the official ``zivid`` package. The SDK allows exactly one
``zivid.Application`` per process, so all backend instances share a single application object.
"""

from __future__ import annotations

import datetime
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from zivid_samples.cameras.backends.camera_backend import CameraBackend
from zivid_samples.cameras.core.models import AcquisitionSettings, CameraInfo, Capture2DSettings, CaptureSettings
from zivid_samples.core.exceptions import (
    CameraCaptureError,
    CameraConfigurationError,
    CameraConnectionError,
    CameraNotFoundError,
    SDKNotAvailableError,
)

try:
    import zivid

    ZIVID_AVAILABLE = True
except ImportError:
    ZIVID_AVAILABLE = False
    zivid = None


class ZividBackend(CameraBackend):
    """Backend for Zivid 3D cameras.

    Requirements:
        - Zivid SDK installed on the host
        - zivid Python package: pip install zivid

    Usage:
        >>> backend = ZividBackend(serial_number="2020C0DE")
        >>> await backend.initialize()
        >>> cloud = await backend.capture_point_cloud(CaptureSettings())
        >>> print(cloud.num_valid_points)
        >>> await backend.close()
    """

    # Class-level singleton Application instance
    _shared_application: Optional[Any] = None
    _application_lock = threading.Lock()

    # Processing finishes inside the first copy, so it is counted as copy time
    reports_processing_time = False

    def __init__(self, serial_number: Optional[str] = None, op_timeout_s: Optional[float] = None, **kwargs):
        """Initialize Zivid backend.

        Args:
            serial_number: Serial number of a specific camera. If None, connects to the first available camera.
            op_timeout_s: Timeout in seconds for SDK operations.

        Raises:
            SDKNotAvailableError: If the zivid package is not available
        """
        if not ZIVID_AVAILABLE:
            raise SDKNotAvailableError(
                "zivid",
                "Install the Zivid SDK to use Zivid cameras:\n"
                "1. Download and install the Zivid SDK for your platform\n"
                "2. pip install zivid",
            )

        super().__init__(serial_number=serial_number, op_timeout_s=op_timeout_s, **kwargs)
        self._camera: Optional[Any] = None
        self._loaded_settings: Dict[Tuple[str, str], Any] = {}

    @classmethod
    def _get_shared_application(cls) -> Any:
        with cls._application_lock:
            if cls._shared_application is None:
                cls._shared_application = zivid.Application()
            return cls._shared_application

    @staticmethod
    def discover() -> List[str]:
        """Discover available Zivid cameras.

        Returns:
            List of serial numbers for available cameras

        Raises:
            SDKNotAvailableError: If the zivid package is not available
        """
        return [device["serial_number"] for device in ZividBackend.discover_detailed()]

    @staticmethod
    def discover_detailed() -> List[Dict[str, str]]:
        """Discover Zivid cameras with model and firmware information."""
        if not ZIVID_AVAILABLE:
            raise SDKNotAvailableError("zivid", "Zivid SDK not available")

        app = ZividBackend._get_shared_application()
        return [
            {
                "serial_number": camera.info.serial_number,
                "model_name": camera.info.model_name,
                "firmware_version": camera.info.firmware_version,
            }
            for camera in app.cameras()
        ]

    # =========================================================================
    # Settings conversion
    # =========================================================================

    @staticmethod
    def _acquisition_kwargs(acquisition: AcquisitionSettings) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        if acquisition.aperture is not None:
            kwargs["aperture"] = acquisition.aperture
        if acquisition.exposure_time is not None:
            kwargs["exposure_time"] = datetime.timedelta(microseconds=acquisition.exposure_time)
        if acquisition.brightness is not None:
            kwargs["brightness"] = acquisition.brightness
        if acquisition.gain is not None:
            kwargs["gain"] = acquisition.gain
        return kwargs

    def _load_sdk_settings(self, sdk_class: Any, path: Path) -> Any:
        """Load a settings file with the SDK itself, once per file."""
        key = (sdk_class.__name__, str(path))
        if key not in self._loaded_settings:
            try:
                self._loaded_settings[key] = sdk_class.load(str(path))
            except RuntimeError as e:
                raise CameraConfigurationError(f"Zivid SDK could not load settings file {path}: {e}") from e
        return self._loaded_settings[key]

    def _to_sdk_settings(self, settings: CaptureSettings) -> Any:
        if settings.source_path is not None:
            return self._load_sdk_settings(zivid.Settings, settings.source_path)

        sdk_settings = zivid.Settings(
            acquisitions=[zivid.Settings.Acquisition(**self._acquisition_kwargs(a)) for a in settings.acquisitions]
        )
        filters = sdk_settings.processing.filters
        filters.outlier.removal.enabled = settings.outlier_removal_enabled
        filters.outlier.removal.threshold = settings.outlier_removal_threshold
        filters.smoothing.gaussian.enabled = settings.smoothing_enabled
        filters.smoothing.gaussian.sigma = settings.smoothing_sigma
        return sdk_settings

    def _to_sdk_settings_2d(self, settings_2d: Capture2DSettings) -> Any:
        if settings_2d.source_path is not None:
            return self._load_sdk_settings(zivid.Settings2D, settings_2d.source_path)

        return zivid.Settings2D(
            acquisitions=[
                zivid.Settings2D.Acquisition(**self._acquisition_kwargs(a)) for a in settings_2d.acquisitions
            ]
        )

    # =========================================================================
    # Blocking SDK primitives
    # =========================================================================

    def _connect(self) -> CameraInfo:
        app = self._get_shared_application()

        if self.serial_number is not None:
            available = [camera.info.serial_number for camera in app.cameras()]
            if self.serial_number not in available:
                raise CameraNotFoundError(
                    f"Zivid camera '{self.serial_number}' not found. Available cameras: {available}"
                )

        try:
            if self.serial_number is None:
                self._camera = app.connect_camera()
            else:
                self._camera = app.connect_camera(serial_number=self.serial_number)
        except RuntimeError as e:
            raise CameraConnectionError(f"Failed to connect to Zivid camera {self.serial_number}: {e}") from e

        info = self._camera.info
        return CameraInfo(
            serial_number=info.serial_number,
            model_name=info.model_name,
            firmware_version=info.firmware_version,
            backend="Zivid",
        )

    def _disconnect(self) -> None:
        if self._camera is not None:
            self._camera.disconnect()
            self._camera = None

    def _capture_3d(self, sdk_settings: Any) -> Any:
        try:
            return self._camera.capture(sdk_settings)
        except RuntimeError as e:
            raise CameraCaptureError(f"3D capture failed on {self.name}: {e}") from e

    def _capture_2d(self, sdk_settings_2d: Any) -> Any:
        try:
            return self._camera.capture(sdk_settings_2d)
        except RuntimeError as e:
            raise CameraCaptureError(f"2D capture failed on {self.name}: {e}") from e

    def _point_cloud(self, frame: Any) -> Any:
        return frame.point_cloud()

    def _wait_until_processing_complete(self, point_cloud: Any) -> None:
        # The Python SDK has no explicit wait; processing completes inside the first copy_data call.
        pass

    def _copy_points_xyz(self, point_cloud: Any) -> np.ndarray:
        return point_cloud.copy_data("xyz")

    def _copy_colors_rgba(self, point_cloud: Any) -> np.ndarray:
        return point_cloud.copy_data("rgba")

    def _copy_normals_xyz(self, point_cloud: Any) -> np.ndarray:
        return point_cloud.copy_data("normals")

    def _copy_data_xyzrgba(self, point_cloud: Any) -> np.ndarray:
        return point_cloud.copy_data("xyzrgba")

    def _copy_image_rgba(self, frame_2d: Any) -> np.ndarray:
        return frame_2d.image_rgba().copy_data()

    @property
    def name(self) -> str:
        return f"Zivid:{self.serial_number}"
