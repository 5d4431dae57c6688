"""Configuration for fuzzbuild-core."""

from rules.config import (
    CONFIG_FILENAME,
    DEFAULT_SHIM_IMPORT,
    ConfigError,
    FuzzBuildConfig,
    load_config,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_SHIM_IMPORT",
    "ConfigError",
    "FuzzBuildConfig",
    "load_config",
]
