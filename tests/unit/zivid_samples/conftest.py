"""Fake vendor SDK modules for unit tests."""

import sys
import types
from types import SimpleNamespace

import numpy as np
import pytest


def create_fake_zivid(serial_numbers=("ZV001", "ZV002"), width=8, height=6):
    """Create a fake zivid module with a grid of points, some of them invalid."""
    zivid = types.ModuleType("zivid")
    zivid.applications_created = 0

    class _Acquisition:
        def __init__(self, **kwargs):
            self.kwargs = kwargs

    class Settings:
        Acquisition = _Acquisition

        def __init__(self, acquisitions=None):
            self.acquisitions = list(acquisitions or [])
            self.loaded_from = None
            self.processing = SimpleNamespace(
                filters=SimpleNamespace(
                    outlier=SimpleNamespace(removal=SimpleNamespace(enabled=False, threshold=0.0)),
                    smoothing=SimpleNamespace(gaussian=SimpleNamespace(enabled=False, sigma=0.0)),
                )
            )

        @classmethod
        def load(cls, file_name):
            settings = cls()
            settings.loaded_from = file_name
            return settings

    class Settings2D:
        Acquisition = _Acquisition

        def __init__(self, acquisitions=None):
            self.acquisitions = list(acquisitions or [])
            self.loaded_from = None

        @classmethod
        def load(cls, file_name):
            settings = cls()
            settings.loaded_from = file_name
            return settings

    def make_grids():
        xyz = np.arange(height * width * 3, dtype=np.float32).reshape(height, width, 3)
        xyz[0, :] = np.nan
        rgba = np.full((height, width, 4), 200, dtype=np.uint8)
        normals = np.zeros((height, width, 3), dtype=np.float32)
        normals[:, :, 2] = 1.0
        return xyz, rgba, normals

    class PointCloud:
        def __init__(self):
            self.xyz, self.rgba, self.normals = make_grids()

        def copy_data(self, data_format):
            if data_format == "xyz":
                return self.xyz.copy()
            if data_format == "rgba":
                return self.rgba.copy()
            if data_format == "normals":
                return self.normals.copy()
            if data_format == "xyzrgba":
                return np.concatenate([self.xyz, self.rgba.astype(np.float32)], axis=-1)
            raise ValueError(f"Unsupported data format: {data_format}")

    class Frame:
        def __init__(self, settings):
            self.settings = settings

        def point_cloud(self):
            return PointCloud()

    class Image:
        def copy_data(self):
            return np.zeros((height, width, 4), dtype=np.uint8)

    class Frame2D:
        def __init__(self, settings):
            self.settings = settings

        def image_rgba(self):
            return Image()

    class Camera:
        def __init__(self, serial_number):
            self.info = SimpleNamespace(
                serial_number=serial_number, model_name="Zivid 2+ M60", firmware_version="2.12.0"
            )
            self.connected = False
            self.captured = []
            self.fail_capture = False

        def capture(self, settings):
            if self.fail_capture:
                raise RuntimeError("Capture failed")
            self.captured.append(settings)
            if isinstance(settings, Settings2D):
                return Frame2D(settings)
            return Frame(settings)

        def disconnect(self):
            self.connected = False

    class Application:
        def __init__(self):
            zivid.applications_created += 1
            self._cameras = [Camera(serial) for serial in serial_numbers]

        def cameras(self):
            return list(self._cameras)

        def connect_camera(self, serial_number=None):
            if not self._cameras:
                raise RuntimeError("No cameras found")
            for camera in self._cameras:
                if serial_number is None or camera.info.serial_number == serial_number:
                    camera.connected = True
                    return camera
            raise RuntimeError(f"No camera with serial number {serial_number}")

    zivid.Application = Application
    zivid.Settings = Settings
    zivid.Settings2D = Settings2D
    return zivid


def create_fake_halcon():
    """Create a fake halcon module that records operator calls."""
    halcon = types.ModuleType("halcon")
    halcon.calls = []
    halcon.fail_on = set()
    halcon.written = {}

    class HError(Exception):
        pass

    def _record(operator, *args):
        halcon.calls.append((operator, args))
        if operator in halcon.fail_on:
            raise HError(f"HALCON error #2036 in operator {operator}")

    def get_system(query):
        _record("get_system", query)
        return ["true"]

    def gen_object_model_3d_from_points(x, y, z):
        _record("gen_object_model_3d_from_points", x, y, z)
        return {"x": x, "y": y, "z": z, "object": {}, "points": {}}

    def set_object_model_3d_attrib_mod(model, attrib_name, attach_to, values):
        _record("set_object_model_3d_attrib_mod", attrib_name, attach_to, values)
        key = tuple(attrib_name) if isinstance(attrib_name, list) else attrib_name
        model[attach_to][key] = values

    def write_object_model_3d(model, file_type, file_name, param_name, param_value):
        _record("write_object_model_3d", file_type, file_name, param_name, param_value)
        with open(file_name, "w") as f:
            f.write("ply\n")
        halcon.written[file_name] = (model, {param_name: param_value})

    halcon.HError = HError
    halcon.get_system = get_system
    halcon.gen_object_model_3d_from_points = gen_object_model_3d_from_points
    halcon.set_object_model_3d_attrib_mod = set_object_model_3d_attrib_mod
    halcon.write_object_model_3d = write_object_model_3d
    return halcon


@pytest.fixture
def fake_zivid(monkeypatch):
    """Install a fake zivid SDK into the Zivid backend."""
    from zivid_samples.cameras.backends.zivid import zivid_backend

    fake = create_fake_zivid()
    monkeypatch.setitem(sys.modules, "zivid", fake)
    monkeypatch.setattr(zivid_backend, "zivid", fake)
    monkeypatch.setattr(zivid_backend, "ZIVID_AVAILABLE", True)
    monkeypatch.setattr(zivid_backend.ZividBackend, "_shared_application", None)
    return fake


@pytest.fixture
def fake_halcon(monkeypatch):
    """Install a fake halcon SDK into the object model module."""
    from zivid_samples.halcon import object_model

    fake = create_fake_halcon()
    monkeypatch.setitem(sys.modules, "halcon", fake)
    monkeypatch.setattr(object_model, "ha", fake)
    monkeypatch.setattr(object_model, "HALCON_AVAILABLE", True)
    return fake
