import logging
import os
import tempfile

# Keep test logs out of the user's cache directory; must happen before zivid_samples configures its loggers
_TEST_LOG_ROOT = tempfile.mkdtemp(prefix="zivid_samples_tests_")
os.environ.setdefault("ZIVID_SAMPLES_DIR_PATHS__LOGGER_DIR", os.path.join(_TEST_LOG_ROOT, "logs"))
os.environ.setdefault("ZIVID_SAMPLES_DIR_PATHS__STRUCT_LOGGER_DIR", os.path.join(_TEST_LOG_ROOT, "structlogs"))

import pytest  # noqa: E402

from zivid_samples.cameras.backends.zivid.mock_zivid_backend import MockZividBackend  # noqa: E402
from zivid_samples.cameras.backends.zivid.zivid_backend import ZividBackend  # noqa: E402
from zivid_samples.cameras.core.async_camera import AsyncCamera  # noqa: E402
from zivid_samples.halcon.object_model import HalconObjectModel  # noqa: E402
from zivid_samples.samples.capture_halcon import CaptureHalconViaZivid  # noqa: E402
from zivid_samples.samples.multi_camera import MultiCameraCaptureInParallel  # noqa: E402

MOCK_WIDTH = 16
MOCK_HEIGHT = 12

# Classes whose cached settings must be re-read when a test changes the environment
CONFIGURED_CLASSES = (
    MockZividBackend,
    ZividBackend,
    AsyncCamera,
    HalconObjectModel,
    CaptureHalconViaZivid,
    MultiCameraCaptureInParallel,
)


def by_slow_marker(item):
    # Return tuple for sorting: (is_integration, is_slow)
    is_slow = 0 if item.get_closest_marker("slow") is None else 1
    is_integration = 1 if "integration" in str(item.fspath) else 0
    return (is_integration, is_slow)


def pytest_addoption(parser):
    parser.addoption("--slow-last", action="store_true", default=False)


def pytest_collection_modifyitems(items, config):
    if config.getoption("--slow-last"):
        items.sort(key=by_slow_marker)


@pytest.fixture(autouse=True)
def configure_logging_for_tests(caplog):
    """Configure logging to work properly with caplog fixture.

    This fixture ensures that all zivid_samples loggers propagate their messages to the root logger so that caplog can
    capture them properly.
    """
    caplog.set_level(logging.DEBUG)

    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)

    package_logger = logging.getLogger("zivid_samples")
    original_propagate = package_logger.propagate
    package_logger.propagate = True

    yield

    root_logger.setLevel(original_level)
    package_logger.propagate = original_propagate


@pytest.fixture
def reload_settings(monkeypatch):
    """Drop cached class-level settings so they are re-read from the (patched) environment."""
    for cls in CONFIGURED_CLASSES:
        monkeypatch.setattr(cls, "_config", None)
    return monkeypatch


@pytest.fixture
def mock_env(reload_settings):
    """Select the mock backend with two small mock cameras."""
    reload_settings.setenv("ZIVID_SAMPLES_CAMERA__BACKEND", "MockZivid")
    reload_settings.setenv("ZIVID_SAMPLES_CAMERA__MOCK_CAMERA_COUNT", "2")
    reload_settings.setenv("ZIVID_SAMPLES_CAMERA__MOCK_WIDTH", str(MOCK_WIDTH))
    reload_settings.setenv("ZIVID_SAMPLES_CAMERA__MOCK_HEIGHT", str(MOCK_HEIGHT))
    return reload_settings


@pytest.fixture
def mock_grid_size():
    """(height, width) of the grids produced by mock cameras under ``mock_env``."""
    return MOCK_HEIGHT, MOCK_WIDTH
