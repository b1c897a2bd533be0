"""Exception hierarchy for zivid_samples.

Two families are kept apart because the samples report them differently at the top level:

- ``HardwareError`` and its subclasses cover the camera SDK and everything around it (discovery, connection, capture,
  settings files, timeouts, missing SDKs).
- ``ObjectModelError`` covers failures inside the 3D object model SDK (HALCON) and carries the SDK's message.
"""

from typing import Optional


class ZividSamplesError(Exception):
    """Base exception for all zivid_samples errors."""

    pass


class HardwareError(ZividSamplesError):
    """Base exception for hardware related errors."""

    pass


class HardwareOperationError(HardwareError):
    """Raised when a blocking SDK operation fails for a reason not covered by a more specific error."""

    pass


class SDKNotAvailableError(HardwareError):
    """Raised when a required vendor SDK cannot be imported."""

    def __init__(self, sdk_name: str, message: Optional[str] = None):
        self.sdk_name = sdk_name
        super().__init__(message or f"SDK '{sdk_name}' is not available")


class CameraError(HardwareError):
    """Base exception for camera errors."""

    pass


class CameraNotFoundError(CameraError):
    """Raised when a requested camera cannot be found."""

    pass


class CameraConnectionError(CameraError):
    """Raised when connecting to, or using, a camera that is not connected fails."""

    pass


class CameraCaptureError(CameraError):
    """Raised when a 2D or 3D capture fails."""

    pass


class CameraConfigurationError(CameraError):
    """Raised when capture settings are invalid or cannot be loaded."""

    pass


class CameraTimeoutError(CameraError):
    """Raised when a camera operation exceeds its timeout."""

    pass


class ObjectModelError(ZividSamplesError):
    """Raised when the 3D object model SDK reports an error.

    Attributes:
        error_message: The message reported by the SDK.
    """

    def __init__(self, error_message: str):
        self.error_message = error_message
        super().__init__(error_message)
