"""Configuration loading for hubdetect."""

from hubdetect.config.loader import ConfigError, load_config
from hubdetect.config.models import HubDetectConfig

__all__ = [
    "ConfigError",
    "HubDetectConfig",
    "load_config",
]
