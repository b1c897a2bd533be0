from zivid_samples.core.utils import ifnone
from zivid_samples.core.config import SampleSettings
from zivid_samples.core.logger import get_logger, setup_logger
from zivid_samples.core.base import Component, ComponentABC, ComponentMeta

setup_logger()  # Initialize the default logger

__all__ = [
    "Component",
    "ComponentABC",
    "ComponentMeta",
    "get_logger",
    "ifnone",
    "SampleSettings",
    "setup_logger",
]
