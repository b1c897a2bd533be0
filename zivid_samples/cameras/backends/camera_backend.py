"""Abstract base class for structured light camera backends.

This module defines the interface every camera backend implements. Backends supply small blocking primitives that map
one-to-one onto vendor SDK calls (capture, point cloud, copy, ...); the base class composes them into the async
operations the samples use and owns the per-stage timing, so every backend is measured the same way.
"""

from __future__ import annotations

import asyncio
from abc import abstractmethod
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, List, Optional, TypeVar

import numpy as np

from zivid_samples.cameras.core.models import (
    CameraInfo,
    Capture2DSettings,
    CaptureSettings,
    PointCloudArrays,
)
from zivid_samples.cameras.core.timing import Measured2DTimes, MeasuredTimes, Stopwatch
from zivid_samples.core import ComponentABC
from zivid_samples.core.exceptions import (
    CameraConnectionError,
    CameraTimeoutError,
    HardwareOperationError,
    ZividSamplesError,
)

T = TypeVar("T")


class CameraBackend(ComponentABC):
    """Abstract base class for all structured light camera implementations.

    Attributes:
        serial_number: Unique identifier for the camera (first available camera if None)
        is_open: Camera connection status

    Implementation Guide:
        - Implement the blocking ``_`` primitives with direct SDK calls. They always run on the camera's own
          single-thread executor, created in ``initialize()`` and shut down in ``close()``, so SDK access to one
          camera is serialized while distinct cameras run in parallel.
        - Map SDK-specific exceptions to domain exceptions in ``zivid_samples.core.exceptions``.
        - Override ``_to_sdk_settings`` / ``_to_sdk_settings_2d`` to convert settings before timing starts.

    Example Implementation:
        >>> class MyBackend(CameraBackend):
        ...     def _connect(self) -> CameraInfo:
        ...         self._camera = sdk.connect(self.serial_number)
        ...         return CameraInfo(serial_number=self._camera.serial)
        ...
        ...     def _capture_3d(self, settings):
        ...         return self._camera.capture(settings)
    """

    # False when _wait_until_processing_complete cannot observe processing on its own
    reports_processing_time: bool = True

    def __init__(self, serial_number: Optional[str] = None, op_timeout_s: Optional[float] = None, **kwargs):
        """Initialize base camera backend.

        Args:
            serial_number: Unique identifier for the camera (first available camera if None)
            op_timeout_s: Timeout in seconds for each SDK operation, defaults to the configured value
        """
        super().__init__(**kwargs)

        self.serial_number = serial_number
        self._op_timeout_s = op_timeout_s if op_timeout_s is not None else self.config.ZIVID_SAMPLES_CAMERA.OP_TIMEOUT_S
        self._is_open = False
        self._info: Optional[CameraInfo] = None
        self._executor: Optional[ThreadPoolExecutor] = None

        self.logger.debug(
            f"CameraBackend base initialized: serial_number={self.serial_number}, op_timeout_s={self._op_timeout_s}"
        )

    async def _run_blocking(
        self, func: Callable[..., T], *args: Any, timeout: Optional[float] = None, **kwargs: Any
    ) -> T:
        """Run a blocking SDK call on the camera executor with timeout.

        Args:
            func: The blocking function to call
            *args: Positional arguments for the function
            timeout: Optional timeout override (uses self._op_timeout_s if not provided)
            **kwargs: Keyword arguments for the function

        Returns:
            The result of the function call

        Raises:
            CameraTimeoutError: If operation times out
            HardwareOperationError: If operation fails with a non-domain exception
        """
        effective_timeout = timeout if timeout is not None else self._op_timeout_s
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self._executor, partial(func, *args, **kwargs)), timeout=effective_timeout
            )
        except asyncio.TimeoutError as e:
            raise CameraTimeoutError(f"{self.name} operation timed out after {effective_timeout:.2f}s") from e
        except ZividSamplesError:
            raise
        except Exception as e:
            raise HardwareOperationError(f"{self.name} operation failed: {e}") from e

    def _check_open(self) -> None:
        if not self._is_open:
            raise CameraConnectionError(f"Camera {self.name} is not connected")

    # =========================================================================
    # Abstract Methods - Must be implemented by subclasses
    # =========================================================================

    @staticmethod
    @abstractmethod
    def discover() -> List[str]:
        """Discover available cameras.

        Returns:
            List of serial numbers for available cameras

        Raises:
            SDKNotAvailableError: If required SDK is not available
        """
        raise NotImplementedError

    @classmethod
    async def discover_async(cls) -> List[str]:
        """Async wrapper for discover() - runs discovery in threadpool."""
        return await asyncio.to_thread(cls.discover)

    @abstractmethod
    def _connect(self) -> CameraInfo:
        """Connect to the camera (blocking) and return its information.

        Raises:
            CameraNotFoundError: If the camera cannot be found
            CameraConnectionError: If connection fails
        """
        raise NotImplementedError

    @abstractmethod
    def _disconnect(self) -> None:
        """Disconnect from the camera (blocking)."""
        raise NotImplementedError

    @abstractmethod
    def _capture_3d(self, sdk_settings: Any) -> Any:
        """Capture a 3D frame (blocking). Returns the SDK frame handle."""
        raise NotImplementedError

    @abstractmethod
    def _capture_2d(self, sdk_settings_2d: Any) -> Any:
        """Capture a 2D frame (blocking). Returns the SDK 2D frame handle."""
        raise NotImplementedError

    @abstractmethod
    def _point_cloud(self, frame: Any) -> Any:
        """Get the point cloud handle of a 3D frame."""
        raise NotImplementedError

    @abstractmethod
    def _wait_until_processing_complete(self, point_cloud: Any) -> None:
        """Block until on-device processing of the point cloud has finished."""
        raise NotImplementedError

    @abstractmethod
    def _copy_points_xyz(self, point_cloud: Any) -> np.ndarray:
        """Copy points as an (H, W, 3) float32 grid, NaN where invalid."""
        raise NotImplementedError

    @abstractmethod
    def _copy_colors_rgba(self, point_cloud: Any) -> np.ndarray:
        """Copy colors as an (H, W, 4) uint8 grid."""
        raise NotImplementedError

    @abstractmethod
    def _copy_normals_xyz(self, point_cloud: Any) -> np.ndarray:
        """Copy normals as an (H, W, 3) float32 grid."""
        raise NotImplementedError

    @abstractmethod
    def _copy_data_xyzrgba(self, point_cloud: Any) -> np.ndarray:
        """Copy points and colors together in a single transfer."""
        raise NotImplementedError

    @abstractmethod
    def _copy_image_rgba(self, frame_2d: Any) -> np.ndarray:
        """Copy the RGBA image of a 2D frame."""
        raise NotImplementedError

    @property
    @abstractmethod
    def name(self) -> str:
        """Get camera name in format 'BackendType:serial_number'."""
        raise NotImplementedError

    # =========================================================================
    # Settings conversion hooks
    # =========================================================================

    def _to_sdk_settings(self, settings: CaptureSettings) -> Any:
        """Convert capture settings into the SDK's settings object."""
        return settings

    def _to_sdk_settings_2d(self, settings_2d: Capture2DSettings) -> Any:
        """Convert 2D capture settings into the SDK's 2D settings object."""
        return settings_2d

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self) -> bool:
        """Connect to the camera.

        Returns:
            True if initialization successful

        Raises:
            CameraNotFoundError: If the camera cannot be found
            CameraConnectionError: If connection fails
            SDKNotAvailableError: If the SDK is not available
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"camera-{self.serial_number}")
        try:
            self._info = await self._run_blocking(self._connect)
        except Exception:
            self._shutdown_executor()
            raise

        self.serial_number = self._info.serial_number
        self._is_open = True
        self.logger.info(f"Connected to camera {self.name} ({self._info.model_name or 'unknown model'})")
        return True

    async def close(self) -> None:
        """Disconnect from the camera and release the executor."""
        if not self._is_open:
            self._shutdown_executor()
            return
        try:
            await self._run_blocking(self._disconnect)
        finally:
            self._is_open = False
            self._shutdown_executor()
            self.logger.info(f"Camera {self.name} closed")

    def _shutdown_executor(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    # =========================================================================
    # Capture operations
    # =========================================================================

    async def capture(self, settings: CaptureSettings) -> Any:
        """Capture a 3D frame and return the SDK frame handle."""
        self._check_open()
        sdk_settings = self._to_sdk_settings(settings)
        return await self._run_blocking(self._capture_3d, sdk_settings)

    async def copy_point_cloud(self, frame: Any, include_normals: bool = True) -> PointCloudArrays:
        """Copy points, colors and (optionally) normals of a frame into host memory."""
        self._check_open()
        return await self._run_blocking(self._copy_point_cloud_blocking, frame, include_normals)

    def _copy_point_cloud_blocking(self, frame: Any, include_normals: bool) -> PointCloudArrays:
        point_cloud = self._point_cloud(frame)
        return PointCloudArrays(
            xyz=self._copy_points_xyz(point_cloud),
            rgba=self._copy_colors_rgba(point_cloud),
            normals=self._copy_normals_xyz(point_cloud) if include_normals else None,
        )

    async def capture_point_cloud(self, settings: CaptureSettings, include_normals: bool = True) -> PointCloudArrays:
        """Capture a 3D frame and copy its point cloud grids."""
        frame = await self.capture(settings)
        return await self.copy_point_cloud(frame, include_normals=include_normals)

    async def capture_timed(self, settings: CaptureSettings) -> MeasuredTimes:
        """Capture a 3D frame and copy its data, timing each stage.

        Stages: capture, point cloud, processing, copy and total. The whole sequence runs as one job on the camera
        executor so the measurements are not skewed by event loop scheduling between stages.
        """
        self._check_open()
        sdk_settings = self._to_sdk_settings(settings)
        return await self._run_blocking(self._capture_timed_blocking, sdk_settings)

    def _capture_timed_blocking(self, sdk_settings: Any) -> MeasuredTimes:
        watch = Stopwatch()
        frame = self._capture_3d(sdk_settings)
        capture_time = watch.lap()
        point_cloud = self._point_cloud(frame)
        point_cloud_time = watch.lap()
        self._wait_until_processing_complete(point_cloud)
        process_time = watch.lap()
        self._copy_data_xyzrgba(point_cloud)
        copy_time = watch.lap()

        return MeasuredTimes(
            capture=capture_time,
            point_cloud=point_cloud_time,
            process=process_time,
            copy=copy_time,
            total=watch.elapsed(),
        )

    async def capture_2d_timed(self, settings_2d: Capture2DSettings) -> Measured2DTimes:
        """Capture a 2D frame and copy its RGBA image, timing each stage."""
        self._check_open()
        sdk_settings_2d = self._to_sdk_settings_2d(settings_2d)
        return await self._run_blocking(self._capture_2d_timed_blocking, sdk_settings_2d)

    def _capture_2d_timed_blocking(self, sdk_settings_2d: Any) -> Measured2DTimes:
        watch = Stopwatch()
        frame_2d = self._capture_2d(sdk_settings_2d)
        capture_time = watch.lap()
        self._copy_image_rgba(frame_2d)
        image_time = watch.lap()

        return Measured2DTimes(capture=capture_time, image_rgba=image_time, total=watch.elapsed())

    async def warmup(self, settings: CaptureSettings) -> None:
        """Capture a 3D frame and copy its data, discarding the result."""
        self._check_open()
        sdk_settings = self._to_sdk_settings(settings)
        await self._run_blocking(self._warmup_blocking, sdk_settings)

    def _warmup_blocking(self, sdk_settings: Any) -> None:
        self._copy_data_xyzrgba(self._point_cloud(self._capture_3d(sdk_settings)))

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_open(self) -> bool:
        """Check if camera is connected."""
        return self._is_open

    @property
    def info(self) -> Optional[CameraInfo]:
        """Camera information, available once connected."""
        return self._info

    # =========================================================================
    # Context Manager Support
    # =========================================================================

    async def __aenter__(self) -> "CameraBackend":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        status = "open" if self._is_open else "closed"
        return f"{self.__class__.__name__}(serial_number={self.serial_number}, status={status})"
