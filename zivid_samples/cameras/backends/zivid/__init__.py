"""Zivid structured light camera backend."""

from zivid_samples.cameras.backends.zivid.mock_zivid_backend import MockZividBackend
from zivid_samples.cameras.backends.zivid.zivid_backend import ZIVID_AVAILABLE, ZividBackend

__all__ = ["ZividBackend", "MockZividBackend", "ZIVID_AVAILABLE"]
