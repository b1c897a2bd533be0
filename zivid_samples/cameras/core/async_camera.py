"""Async camera interface providing high-level capture operations."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, List, Optional, Tuple, Type

from zivid_samples.cameras.core.models import CameraInfo, Capture2DSettings, CaptureSettings, PointCloudArrays
from zivid_samples.cameras.core.timing import Measured2DTimes, MeasuredTimes
from zivid_samples.core import Component
from zivid_samples.core.exceptions import CameraConnectionError, CameraNotFoundError

if TYPE_CHECKING:
    from zivid_samples.cameras.backends.camera_backend import CameraBackend


def _backend_class(backend_type: str) -> Type[CameraBackend]:
    key = backend_type.lower()
    if key == "zivid":
        from zivid_samples.cameras.backends.zivid.zivid_backend import ZividBackend

        return ZividBackend
    if key == "mockzivid":
        from zivid_samples.cameras.backends.zivid.mock_zivid_backend import MockZividBackend

        return MockZividBackend
    raise ValueError(f"Unknown camera backend type: {backend_type}")


def _parse_name(name: Optional[str], default_backend: str) -> Tuple[str, Optional[str]]:
    if not name:
        return default_backend, None
    if ":" in name:
        backend_type, serial_number = name.split(":", 1)
        return backend_type, serial_number or None
    return default_backend, name


def discover_cameras(backend: Optional[str] = None) -> List[str]:
    """List available cameras as ``Backend:serial`` names.

    Args:
        backend: Backend type (``Zivid`` or ``MockZivid``), defaults to the configured backend

    Raises:
        SDKNotAvailableError: If the backend's SDK is not available
    """
    backend_type = backend or AsyncCamera.config.ZIVID_SAMPLES_CAMERA.BACKEND
    backend_cls = _backend_class(backend_type)
    return [f"{backend_type}:{serial}" for serial in backend_cls.discover()]


class AsyncCamera(Component):
    """Async camera interface.

    Usage:
        >>> camera = await AsyncCamera.open()
        >>> cloud = await camera.capture_point_cloud(CaptureSettings())
        >>> print(cloud.num_valid_points)
        >>> await camera.close()

        >>> async with await AsyncCamera.open("MockZivid:MOCK001") as camera:
        ...     times = await camera.capture_timed(CaptureSettings())
    """

    def __init__(self, backend: CameraBackend, **kwargs):
        """Initialize async camera.

        Args:
            backend: Backend instance (e.g., ZividBackend)
        """
        super().__init__(**kwargs)
        self._backend = backend

    @classmethod
    async def open(cls, name: Optional[str] = None, **backend_kwargs: Any) -> "AsyncCamera":
        """Open and initialize a camera.

        Args:
            name: Camera identifier. Format: "Zivid:serial_number" or "MockZivid:serial_number". A bare serial number
                uses the configured backend. If None, opens the first available camera of the configured backend.
            **backend_kwargs: Extra keyword arguments for the backend constructor

        Returns:
            Initialized AsyncCamera instance

        Raises:
            CameraNotFoundError: If camera not found
            CameraConnectionError: If connection fails

        Examples:
            >>> camera = await AsyncCamera.open()
            >>> camera = await AsyncCamera.open("Zivid:2020C0DE")
        """
        backend_type, serial_number = _parse_name(name, cls.config.ZIVID_SAMPLES_CAMERA.BACKEND)
        backend = _backend_class(backend_type)(serial_number=serial_number, **backend_kwargs)

        success = await backend.initialize()
        if not success:
            raise CameraConnectionError(f"Failed to open camera: {name or 'first available'}")

        return cls(backend)

    @classmethod
    async def open_all(cls, backend: Optional[str] = None, **backend_kwargs: Any) -> List["AsyncCamera"]:
        """Discover and open every available camera of a backend.

        Cameras are connected one after another in discovery order; if any connection fails, the cameras opened so
        far are closed before the error propagates.

        Raises:
            CameraNotFoundError: If no camera is found
        """
        names = await asyncio.to_thread(discover_cameras, backend)
        if not names:
            raise CameraNotFoundError(f"No {backend or cls.config.ZIVID_SAMPLES_CAMERA.BACKEND} cameras found")

        cameras: List[AsyncCamera] = []
        try:
            for name in names:
                cls.logger.info(f"Connecting to camera : {name.split(':', 1)[1]}")
                cameras.append(await cls.open(name, **backend_kwargs))
        except Exception:
            for camera in cameras:
                await camera.close()
            raise
        return cameras

    # Lifecycle
    async def close(self) -> None:
        """Close camera and release resources."""
        await self._backend.close()

    # Capture operations
    async def capture(self, settings: CaptureSettings) -> Any:
        """Capture a 3D frame and return the SDK frame handle."""
        return await self._backend.capture(settings)

    async def copy_point_cloud(self, frame: Any, include_normals: bool = True) -> PointCloudArrays:
        """Copy the point cloud grids of a captured frame."""
        return await self._backend.copy_point_cloud(frame, include_normals=include_normals)

    async def capture_point_cloud(self, settings: CaptureSettings, include_normals: bool = True) -> PointCloudArrays:
        """Capture a 3D frame and copy its point cloud grids.

        Examples:
            >>> cloud = await camera.capture_point_cloud(CaptureSettings())
            >>> print(f"{cloud.width}x{cloud.height}, {cloud.num_valid_points} valid")
        """
        return await self._backend.capture_point_cloud(settings, include_normals=include_normals)

    async def capture_timed(self, settings: CaptureSettings) -> MeasuredTimes:
        """Capture a 3D frame, timing capture, point cloud, processing and copy."""
        return await self._backend.capture_timed(settings)

    async def capture_2d_timed(self, settings_2d: Capture2DSettings) -> Measured2DTimes:
        """Capture a 2D frame, timing capture and image copy."""
        return await self._backend.capture_2d_timed(settings_2d)

    async def warmup(self, settings: CaptureSettings) -> None:
        """Capture and copy a 3D frame, discarding the result."""
        await self._backend.warmup(settings)

    # Properties
    @property
    def name(self) -> str:
        """Camera name in format 'Backend:serial_number'."""
        return self._backend.name

    @property
    def serial_number(self) -> Optional[str]:
        return self._backend.serial_number

    @property
    def info(self) -> Optional[CameraInfo]:
        return self._backend.info

    @property
    def is_open(self) -> bool:
        return self._backend.is_open

    @property
    def backend(self) -> CameraBackend:
        return self._backend

    @property
    def reports_processing_time(self) -> bool:
        """Whether capture_timed measures processing separately from the copy."""
        return self._backend.reports_processing_time

    async def __aenter__(self) -> "AsyncCamera":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"AsyncCamera(name={self.name}, open={self.is_open})"
