"""Data models for camera capture.

This module provides the settings used to drive a capture, the row-major point cloud grids copied out of the camera
SDK, and basic camera information. Settings load from and save to the camera SDK's YAML settings files, so the same
``settingsSlow.yml`` / ``settings2D.yml`` files work with the vendor tools and with these samples.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import yaml

from zivid_samples.core.exceptions import CameraConfigurationError

SETTINGS_ROOT_KEY = "Settings"
SETTINGS_2D_ROOT_KEY = "Settings2D"


@dataclass
class AcquisitionSettings:
    """Settings for a single acquisition.

    Attributes:
        aperture: Lens aperture as an f-number
        exposure_time: Exposure time in microseconds
        brightness: Projector brightness, None keeps the camera default
        gain: Analog gain, None keeps the camera default
    """

    aperture: Optional[float] = None
    exposure_time: Optional[int] = None  # microseconds
    brightness: Optional[float] = None
    gain: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the SDK's YAML layout, excluding None values."""
        values = {
            "Aperture": self.aperture,
            "Brightness": self.brightness,
            "ExposureTime": self.exposure_time,
            "Gain": self.gain,
        }
        return {"Acquisition": {key: value for key, value in values.items() if value is not None}}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AcquisitionSettings":
        """Create acquisition settings from the SDK's YAML layout."""
        values = data.get("Acquisition", data) or {}
        exposure_time = values.get("ExposureTime")
        return cls(
            aperture=_optional_float(values.get("Aperture")),
            exposure_time=int(exposure_time) if exposure_time is not None else None,
            brightness=_optional_float(values.get("Brightness")),
            gain=_optional_float(values.get("Gain")),
        )


@dataclass
class CaptureSettings:
    """Settings for a 3D capture.

    The defaults reproduce the single-acquisition settings of the capture sample: f/5.66 at 8333 µs, with outlier
    removal (threshold 5) and gaussian smoothing (sigma 1.5) enabled.

    Only acquisitions and the outlier and smoothing filters are modeled. Everything else in a settings file (other
    filters, color balance, sampling, region of interest, engine) is kept in ``raw`` and written back by ``save``.

    Attributes:
        source_path: File the settings were loaded from. Backends that read the SDK's own settings files load this
            file directly, so every setting in it applies. Set it to None to capture with the modeled fields only.
        raw: The file contents as loaded
    """

    acquisitions: List[AcquisitionSettings] = field(
        default_factory=lambda: [AcquisitionSettings(aperture=5.66, exposure_time=8333)]
    )
    outlier_removal_enabled: bool = True
    outlier_removal_threshold: float = 5.0
    smoothing_enabled: bool = True
    smoothing_sigma: float = 1.5
    source_path: Optional[Path] = field(default=None, compare=False, repr=False)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        if not self.acquisitions:
            raise CameraConfigurationError("Capture settings need at least one acquisition")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the SDK's YAML layout, on top of the unmodeled keys of ``raw``."""
        modeled = {
            SETTINGS_ROOT_KEY: {
                "Acquisitions": [acquisition.to_dict() for acquisition in self.acquisitions],
                "Processing": {
                    "Filters": {
                        "Outlier": {
                            "Removal": {
                                "Enabled": self.outlier_removal_enabled,
                                "Threshold": self.outlier_removal_threshold,
                            }
                        },
                        "Smoothing": {
                            "Gaussian": {
                                "Enabled": self.smoothing_enabled,
                                "Sigma": self.smoothing_sigma,
                            }
                        },
                    }
                },
            }
        }
        return _merge(self.raw, modeled)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CaptureSettings":
        """Create capture settings from the SDK's YAML layout.

        Keys missing from ``data`` keep their defaults.

        Raises:
            CameraConfigurationError: If the root key is not ``Settings``
        """
        body = _settings_body(data, SETTINGS_ROOT_KEY)
        settings = cls(raw=copy.deepcopy(data))

        acquisitions = body.get("Acquisitions")
        if acquisitions:
            settings.acquisitions = [AcquisitionSettings.from_dict(item) for item in acquisitions]

        filters = (body.get("Processing") or {}).get("Filters") or {}
        removal = (filters.get("Outlier") or {}).get("Removal") or {}
        gaussian = (filters.get("Smoothing") or {}).get("Gaussian") or {}

        if "Enabled" in removal:
            settings.outlier_removal_enabled = bool(removal["Enabled"])
        if "Threshold" in removal:
            settings.outlier_removal_threshold = float(removal["Threshold"])
        if "Enabled" in gaussian:
            settings.smoothing_enabled = bool(gaussian["Enabled"])
        if "Sigma" in gaussian:
            settings.smoothing_sigma = float(gaussian["Sigma"])

        return settings

    @classmethod
    def load(cls, path: Union[str, Path]) -> "CaptureSettings":
        """Load capture settings from a YAML settings file."""
        settings = cls.from_dict(_load_yaml(path))
        settings.source_path = Path(path)
        return settings

    def save(self, path: Union[str, Path]) -> None:
        """Save capture settings to a YAML settings file."""
        _save_yaml(path, self.to_dict())


@dataclass
class Capture2DSettings:
    """Settings for a 2D capture.

    Like ``CaptureSettings``, unmodeled keys are kept in ``raw`` and ``source_path`` records the file loaded from.
    """

    acquisitions: List[AcquisitionSettings] = field(default_factory=lambda: [AcquisitionSettings()])
    source_path: Optional[Path] = field(default=None, compare=False, repr=False)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        if not self.acquisitions:
            raise CameraConfigurationError("2D capture settings need at least one acquisition")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the SDK's YAML layout, on top of the unmodeled keys of ``raw``."""
        modeled = {SETTINGS_2D_ROOT_KEY: {"Acquisitions": [acquisition.to_dict() for acquisition in self.acquisitions]}}
        return _merge(self.raw, modeled)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Capture2DSettings":
        """Create 2D capture settings from the SDK's YAML layout.

        Raises:
            CameraConfigurationError: If the root key is not ``Settings2D``
        """
        body = _settings_body(data, SETTINGS_2D_ROOT_KEY)
        settings = cls(raw=copy.deepcopy(data))
        acquisitions = body.get("Acquisitions")
        if acquisitions:
            settings.acquisitions = [AcquisitionSettings.from_dict(item) for item in acquisitions]
        return settings

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Capture2DSettings":
        """Load 2D capture settings from a YAML settings file."""
        settings = cls.from_dict(_load_yaml(path))
        settings.source_path = Path(path)
        return settings

    def save(self, path: Union[str, Path]) -> None:
        """Save 2D capture settings to a YAML settings file."""
        _save_yaml(path, self.to_dict())


@dataclass
class CameraInfo:
    """Basic information about a connected camera."""

    serial_number: str
    model_name: str = ""
    firmware_version: str = ""
    backend: str = ""

    def __str__(self) -> str:
        return self.serial_number


@dataclass
class PointCloudArrays:
    """Row-major point cloud grids as copied out of the camera SDK.

    Attributes:
        xyz: Points (H, W, 3) float32, NaN where no surface was reconstructed
        rgba: Colors (H, W, 4) uint8
        normals: Surface normals (H, W, 3) float32, may be NaN where xyz is valid
    """

    xyz: np.ndarray
    rgba: Optional[np.ndarray] = None
    normals: Optional[np.ndarray] = None

    def __post_init__(self):
        """Validate grid shapes."""
        if self.xyz.ndim != 3 or self.xyz.shape[2] != 3:
            raise ValueError(f"Expected (H, W, 3) xyz grid, got {self.xyz.shape}")

        if self.rgba is not None and self.rgba.shape != (self.height, self.width, 4):
            raise ValueError(f"Colors shape {self.rgba.shape} doesn't match grid ({self.height}, {self.width}, 4)")

        if self.normals is not None and self.normals.shape != self.xyz.shape:
            raise ValueError(f"Normals shape {self.normals.shape} doesn't match points shape {self.xyz.shape}")

    @property
    def height(self) -> int:
        return self.xyz.shape[0]

    @property
    def width(self) -> int:
        return self.xyz.shape[1]

    @property
    def has_colors(self) -> bool:
        return self.rgba is not None

    @property
    def has_normals(self) -> bool:
        return self.normals is not None

    @property
    def valid_mask(self) -> np.ndarray:
        """Boolean mask (H, W) of cells with a reconstructed point."""
        return ~np.isnan(self.xyz[:, :, 0])

    @property
    def num_valid_points(self) -> int:
        return int(np.count_nonzero(self.valid_mask))

    def __repr__(self) -> str:
        attrs = [f"{self.width}x{self.height}", f"valid={self.num_valid_points}"]
        if self.has_colors:
            attrs.append("colors")
        if self.has_normals:
            attrs.append("normals")
        return f"PointCloudArrays({', '.join(attrs)})"


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _merge(base: Any, override: Any) -> Any:
    # Modeled values win, lists are replaced whole
    if isinstance(base, dict) and isinstance(override, dict):
        merged = dict(base)
        for key, value in override.items():
            merged[key] = _merge(base[key], value) if key in base else value
        return merged
    return override


def _settings_body(data: Dict[str, Any], root_key: str) -> Dict[str, Any]:
    if not isinstance(data, dict) or root_key not in data:
        found = list(data.keys()) if isinstance(data, dict) else type(data).__name__
        raise CameraConfigurationError(f"Expected '{root_key}' settings, found {found}")
    return data[root_key] or {}


def _load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise CameraConfigurationError(f"Settings file not found: {path}")
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise CameraConfigurationError(f"Invalid settings file {path}: {e}") from e


def _save_yaml(path: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(path, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False)
