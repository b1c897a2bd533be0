import configparser
import os
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class ZIVID_SAMPLES_DIR_PATHS(BaseModel):
    ROOT: str
    LOGGER_DIR: str
    STRUCT_LOGGER_DIR: str


class ZIVID_SAMPLES_LOGGER(BaseModel):
    USE_STRUCTLOG: bool = False
    STRUCTLOG_JSON: bool = True


class ZIVID_SAMPLES_CAMERA(BaseModel):
    BACKEND: str = "Zivid"
    OP_TIMEOUT_S: float = 30.0
    MOCK_CAMERA_COUNT: int = 2
    MOCK_WIDTH: int = 320
    MOCK_HEIGHT: int = 240


class ZIVID_SAMPLES_CAPTURE(BaseModel):
    HALCON_FRAMES: int = 25
    MULTI_CAMERA_FRAMES: int = 30
    WARMUP_ROUNDS: int = 5
    OUTPUT_FILE: str = "Zivid3D.ply"
    WRITER: str = "halcon"
    INVERT_NORMALS: bool = False
    SETTINGS_FILE: str = "settingsSlow.yml"
    SETTINGS_2D_FILE: str = "settings2D.yml"


def load_ini_as_dict(ini_path: Path) -> Dict[str, Any]:
    """
    Load and parse an INI file into a nested dictionary with normalized keys.

    Sections and keys are converted to uppercase for uniform access. Tilde (`~`) at the start of a value is expanded
    to the user home directory.

    Args:
        ini_path (Path): Path to the `.ini` configuration file.

    Returns:
        Dict[str, Any]: A dictionary where each section is a key mapped to another dictionary of key-value pairs from
        that section.

    Example:
        .. code-block:: ini

            [ZIVID_SAMPLES_DIR_PATHS]
            ROOT = ~/.cache/zivid_samples

        .. code-block:: python

            config = load_ini_as_dict(Path("config.ini"))
            print(config["ZIVID_SAMPLES_DIR_PATHS"]["ROOT"])
    """
    if not ini_path.exists():
        return {}

    config = configparser.ConfigParser(interpolation=configparser.ExtendedInterpolation())
    config.optionxform = str
    config.read(ini_path)

    result = {}
    for section in config.sections():
        result[section.upper()] = {
            key.upper(): os.path.expanduser(value) if value.startswith("~") else value
            for key, value in config[section].items()
        }
    return result


def load_ini_settings() -> Dict[str, Any]:
    ini_path = Path(__file__).parent / "config.ini"
    return load_ini_as_dict(ini_path)


class SampleSettings(BaseSettings):
    """Settings shared by every sample.

    Values are read, by precedence, from constructor kwargs, environment variables (nested with ``__``, e.g.
    ``ZIVID_SAMPLES_CAPTURE__HALCON_FRAMES=5``), a ``.env`` file and finally the packaged ``config.ini``.
    """

    ZIVID_SAMPLES_DIR_PATHS: ZIVID_SAMPLES_DIR_PATHS
    ZIVID_SAMPLES_LOGGER: ZIVID_SAMPLES_LOGGER
    ZIVID_SAMPLES_CAMERA: ZIVID_SAMPLES_CAMERA
    ZIVID_SAMPLES_CAPTURE: ZIVID_SAMPLES_CAPTURE

    model_config = {
        "env_nested_delimiter": "__",
        "case_sensitive": True,
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        def _expand_tilde(obj):
            if isinstance(obj, str):
                return os.path.expanduser(obj) if obj.startswith("~") else obj
            if isinstance(obj, dict):
                return {k: _expand_tilde(v) for k, v in obj.items()}
            return obj

        def env_settings_expanded():
            return _expand_tilde(env_settings())

        return (
            init_settings,  # constructor kwargs
            env_settings_expanded,  # env vars (with '~' expanded) take precedence
            dotenv_settings,  # then .env
            load_ini_settings,  # then INI file (lowest precedence)
            file_secret_settings,
        )
