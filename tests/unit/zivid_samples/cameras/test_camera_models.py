"""Tests for capture settings, camera info and point cloud grids."""

import numpy as np
import pytest
import yaml

from zivid_samples.cameras.core.models import (
    AcquisitionSettings,
    CameraInfo,
    Capture2DSettings,
    CaptureSettings,
    PointCloudArrays,
)
from zivid_samples.core.exceptions import CameraConfigurationError
from zivid_samples.samples.multi_camera import SETTINGS_TEMPLATE_DIR


class TestAcquisitionSettings:
    def test_to_dict_excludes_none(self):
        acquisition = AcquisitionSettings(aperture=5.66, exposure_time=8333)
        assert acquisition.to_dict() == {"Acquisition": {"Aperture": 5.66, "ExposureTime": 8333}}

    def test_from_dict_accepts_wrapped_and_bare_layouts(self):
        wrapped = AcquisitionSettings.from_dict({"Acquisition": {"Aperture": 8, "ExposureTime": "10000"}})
        bare = AcquisitionSettings.from_dict({"Aperture": 8, "ExposureTime": 10000})
        assert wrapped == bare
        assert wrapped.aperture == 8.0
        assert wrapped.exposure_time == 10000
        assert wrapped.brightness is None


class TestCaptureSettings:
    def test_defaults(self):
        settings = CaptureSettings()
        assert len(settings.acquisitions) == 1
        assert settings.acquisitions[0].aperture == 5.66
        assert settings.acquisitions[0].exposure_time == 8333
        assert settings.outlier_removal_enabled is True
        assert settings.outlier_removal_threshold == 5.0
        assert settings.smoothing_enabled is True
        assert settings.smoothing_sigma == 1.5

    def test_requires_acquisition(self):
        with pytest.raises(CameraConfigurationError):
            CaptureSettings(acquisitions=[])

    def test_save_and_load(self, tmp_path):
        settings = CaptureSettings(
            acquisitions=[
                AcquisitionSettings(aperture=8.0, exposure_time=6500, brightness=1.8),
                AcquisitionSettings(aperture=4.0, exposure_time=10000, gain=1.5),
            ],
            smoothing_enabled=False,
        )
        path = tmp_path / "settings.yml"
        settings.save(path)

        data = yaml.safe_load(path.read_text())
        assert list(data.keys()) == ["Settings"]
        assert CaptureSettings.load(path) == settings

    def test_missing_keys_keep_defaults(self):
        settings = CaptureSettings.from_dict({"Settings": {"Processing": {"Filters": {"Smoothing": {}}}}})
        assert settings == CaptureSettings()

    def test_yaml_booleans(self, tmp_path):
        path = tmp_path / "settings.yml"
        path.write_text(
            "Settings:\n"
            "  Processing:\n"
            "    Filters:\n"
            "      Outlier:\n"
            "        Removal:\n"
            "          Enabled: no\n"
            "          Threshold: 3\n"
        )
        settings = CaptureSettings.load(path)
        assert settings.outlier_removal_enabled is False
        assert settings.outlier_removal_threshold == 3.0

    def test_unmodeled_keys_survive_save(self, tmp_path):
        path = tmp_path / "settings.yml"
        path.write_text(
            "__version__:\n"
            "  serializer: 1\n"
            "  data: 22\n"
            "Settings:\n"
            "  Acquisitions:\n"
            "    - Acquisition:\n"
            "        Aperture: 5.66\n"
            "        ExposureTime: 8333\n"
            "  Processing:\n"
            "    Filters:\n"
            "      Noise:\n"
            "        Removal:\n"
            "          Enabled: yes\n"
            "          Threshold: 7\n"
            "      Smoothing:\n"
            "        Gaussian:\n"
            "          Enabled: no\n"
            "  Sampling:\n"
            "    Pixel: blueSubsample2x2\n"
        )
        settings = CaptureSettings.load(path)
        assert settings.source_path == path
        assert settings == CaptureSettings(
            acquisitions=[AcquisitionSettings(aperture=5.66, exposure_time=8333)], smoothing_enabled=False
        )

        settings.smoothing_sigma = 2.5
        out = tmp_path / "out.yml"
        settings.save(out)
        data = yaml.safe_load(out.read_text())
        assert data["__version__"] == {"serializer": 1, "data": 22}
        assert data["Settings"]["Sampling"]["Pixel"] == "blueSubsample2x2"
        assert data["Settings"]["Processing"]["Filters"]["Noise"]["Removal"] == {"Enabled": True, "Threshold": 7}
        assert data["Settings"]["Processing"]["Filters"]["Smoothing"]["Gaussian"] == {"Enabled": False, "Sigma": 2.5}
        assert data["Settings"]["Acquisitions"] == [{"Acquisition": {"Aperture": 5.66, "ExposureTime": 8333}}]

    def test_built_settings_have_no_source(self):
        settings = CaptureSettings()
        assert settings.source_path is None
        assert settings.raw == {}

    def test_wrong_root_key(self):
        with pytest.raises(CameraConfigurationError, match="Settings"):
            CaptureSettings.from_dict({"Settings2D": {}})

    def test_missing_file(self, tmp_path):
        with pytest.raises(CameraConfigurationError, match="not found"):
            CaptureSettings.load(tmp_path / "missing.yml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text("Settings: [unclosed\n")
        with pytest.raises(CameraConfigurationError, match="Invalid settings file"):
            CaptureSettings.load(path)

    def test_packaged_template(self):
        settings = CaptureSettings.load(SETTINGS_TEMPLATE_DIR / "settingsSlow.yml")
        assert len(settings.acquisitions) == 2
        assert all(a.exposure_time is not None for a in settings.acquisitions)


class TestCapture2DSettings:
    def test_save_and_load(self, tmp_path):
        settings = Capture2DSettings(acquisitions=[AcquisitionSettings(aperture=2.83, exposure_time=10000)])
        path = tmp_path / "settings2D.yml"
        settings.save(path)
        assert Capture2DSettings.load(path) == settings

    def test_load_records_source_and_unmodeled_keys(self, tmp_path):
        path = tmp_path / "settings2D.yml"
        path.write_text(
            "Settings2D:\n"
            "  Acquisitions:\n"
            "    - Acquisition:\n"
            "        Aperture: 2.83\n"
            "        ExposureTime: 10000\n"
            "  Sampling:\n"
            "    Color: rgb\n"
            "    Pixel: all\n"
        )
        settings = Capture2DSettings.load(path)
        assert settings.source_path == path

        out = tmp_path / "out.yml"
        settings.save(out)
        assert yaml.safe_load(out.read_text())["Settings2D"]["Sampling"] == {"Color": "rgb", "Pixel": "all"}

    def test_empty_body_uses_defaults(self):
        assert Capture2DSettings.from_dict({"Settings2D": None}) == Capture2DSettings()

    def test_rejects_3d_settings(self):
        with pytest.raises(CameraConfigurationError):
            Capture2DSettings.from_dict(CaptureSettings().to_dict())

    def test_packaged_template(self):
        settings = Capture2DSettings.load(SETTINGS_TEMPLATE_DIR / "settings2D.yml")
        assert len(settings.acquisitions) >= 1


class TestCameraInfo:
    def test_str_is_serial_number(self):
        assert str(CameraInfo(serial_number="2020C0DE", model_name="Zivid 2+ M130")) == "2020C0DE"


class TestPointCloudArrays:
    def test_valid_mask(self):
        xyz = np.ones((2, 3, 3), dtype=np.float32)
        xyz[0, 1] = np.nan
        xyz[1, 2] = np.nan
        cloud = PointCloudArrays(xyz=xyz)

        assert cloud.height == 2
        assert cloud.width == 3
        assert cloud.num_valid_points == 4
        np.testing.assert_array_equal(cloud.valid_mask, [[True, False, True], [True, True, False]])
        assert not cloud.has_colors
        assert not cloud.has_normals

    def test_rejects_bad_xyz_shape(self):
        with pytest.raises(ValueError, match="xyz"):
            PointCloudArrays(xyz=np.zeros((4, 3), dtype=np.float32))

    def test_rejects_mismatched_colors(self):
        with pytest.raises(ValueError, match="Colors shape"):
            PointCloudArrays(xyz=np.zeros((2, 3, 3)), rgba=np.zeros((3, 2, 4), dtype=np.uint8))

    def test_rejects_mismatched_normals(self):
        with pytest.raises(ValueError, match="Normals shape"):
            PointCloudArrays(xyz=np.zeros((2, 3, 3)), normals=np.zeros((2, 2, 3)))

    def test_repr(self):
        cloud = PointCloudArrays(
            xyz=np.zeros((2, 3, 3)), rgba=np.zeros((2, 3, 4), dtype=np.uint8), normals=np.zeros((2, 3, 3))
        )
        assert repr(cloud) == "PointCloudArrays(3x2, valid=6, colors, normals)"
