"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management interface,
implementing a singleton pattern to ensure configuration is loaded only once.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import AppConfig
from ..validation import handle_config_error, ErrorSeverity
from .loader import get_env_config_path, load_main_config
from .validators import merge_overrides, validate_app_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

# This global variable will hold the single instance of the loaded AppConfig.
_CONFIG: Optional[AppConfig] = None

# Default path to the configuration file, relative to this script's location.
# Overridden by set_config_path() or the JVMMONITOR_CONFIG environment variable.
_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path.

    Args:
        config_path: Path to the config.toml file

    Note:
        Clears any cached configuration so the next get_config() call
        reloads from the new path.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = config_path
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """
    Clear the cached configuration, forcing a reload on next access.
    """
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def resolve_config_path(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """
    Pick the configuration file to load.

    Order: explicit path, ``JVMMONITOR_CONFIG``, the default path. Returns
    None when neither an explicit nor an environment path is given and the
    default file does not exist, meaning configuration comes from overrides
    only.
    """
    if explicit_path is not None:
        return explicit_path
    env_path = get_env_config_path()
    if env_path is not None:
        return env_path
    if _CONFIG_FILE_PATH.exists():
        return _CONFIG_FILE_PATH
    return None


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> AppConfig:
    """
    Load, validate and cache the application configuration.

    Args:
        config_path: TOML file to read, or None to use overrides only
        overrides: Dotted-key values (e.g. ``{"monitor.pid": 42}``) applied
            on top of the file

    Returns:
        Fully validated AppConfig instance

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    global _CONFIG
    try:
        raw = load_main_config(config_path) if config_path is not None else {}
        app_config = validate_app_config(merge_overrides(raw, overrides))
    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise

    logger.info(
        f"Configuration loaded: pid={app_config.monitor.pid}, "
        f"interval={app_config.monitor.interval_seconds}s, target={app_config.gelf.target}"
    )
    _CONFIG = app_config
    return app_config


def get_config() -> AppConfig:
    """
    Get the global application configuration, loading it if necessary.

    Returns:
        The singleton AppConfig instance

    Raises:
        FileNotFoundError: If no configuration file can be found
        ValidationError: If configuration validation fails
    """
    if _CONFIG is None:
        config_path = resolve_config_path()
        if config_path is None:
            raise FileNotFoundError(
                f"main configuration file not found: {_CONFIG_FILE_PATH}"
            )
        return load_config(config_path)
    return _CONFIG


def is_config_loaded() -> bool:
    """
    Check if configuration has been loaded and cached.
    """
    return _CONFIG is not None


def get_config_info() -> dict:
    """
    Get information about the current configuration state.

    Returns:
        Dictionary with configuration metadata
    """
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "pid": _CONFIG.monitor.pid if _CONFIG else None,
        "target": _CONFIG.gelf.target if _CONFIG else None,
    }
