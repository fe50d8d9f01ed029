"""Configuration system for redis-cloud-backup.

This module provides TOML-based configuration loading, merging with
command line options, and the immutable run configuration.
"""

from .loader import (
    ConfigError,
    build_config,
    find_config_file,
    load_config,
)
from .schema import BackupConfig, TargetConfig

__all__ = [
    "BackupConfig",
    "TargetConfig",
    "build_config",
    "load_config",
    "find_config_file",
    "ConfigError",
]
