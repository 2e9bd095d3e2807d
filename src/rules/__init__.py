"""Run configuration and diagnostic suppression rules."""

from rules.config import (
    CONFIG_FILENAME,
    ConfigError,
    PyrethrumConfig,
    load_config,
)
from rules.ignore import filter_ignored, is_ignored

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "PyrethrumConfig",
    "filter_ignored",
    "is_ignored",
    "load_config",
]
