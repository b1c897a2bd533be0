"""Camera backend implementations.

This module provides the abstract base class and concrete implementations
for camera backends.
"""

from zivid_samples.cameras.backends.camera_backend import CameraBackend
from zivid_samples.cameras.backends.zivid import MockZividBackend, ZividBackend

__all__ = [
    "CameraBackend",
    "ZividBackend",
    "MockZividBackend",
]
