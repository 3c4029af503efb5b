"""
Configuration management for the jvmmonitor package.

This module provides a clean interface for loading, validating, and accessing
configuration data from a TOML file plus command-line overrides.
"""

# Main configuration interface
from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    load_config,
    resolve_config_path,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import CONFIG_ENV_VAR, load_main_config, load_toml_file
from .storage_config import StorageConfig
from .validators import (
    merge_overrides,
    validate_app_config,
    validate_gelf_config,
    validate_label_config,
    validate_monitor_config,
    validate_storage_config,
)

__all__ = [
    # Main interface
    "get_config",
    "load_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    "resolve_config_path",
    # Advanced interface
    "CONFIG_ENV_VAR",
    "StorageConfig",
    "load_toml_file",
    "load_main_config",
    "merge_overrides",
    "validate_app_config",
    "validate_gelf_config",
    "validate_label_config",
    "validate_monitor_config",
    "validate_storage_config",
]
