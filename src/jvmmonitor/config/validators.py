"""
Configuration validation utilities.

This module turns the raw configuration tables (from TOML and command-line
overrides) into the typed configuration dataclasses.
"""

import logging
from typing import Any, Dict, Optional

from ..models.config import AppConfig, GelfConfig, LabelConfig, MonitorConfig
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

SOURCE_TYPES = ["jcmd", "psutil"]


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from the ``[monitor]`` table.

    Args:
        monitor_data: Raw monitor configuration

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    raw_pid = monitor_data.get("pid")
    if raw_pid is None:
        raise ValidationError(
            "Process id not configured (monitor.pid or --pid)",
            field_name="monitor.pid",
        )
    pid = validate_positive_integer(raw_pid, min_value=1, field_name="monitor.pid")

    raw_interval = monitor_data.get("interval_seconds")
    if raw_interval is None:
        raise ValidationError(
            "Monitor interval not configured (monitor.interval_seconds or --interval)",
            field_name="monitor.interval_seconds",
        )
    interval_seconds = validate_positive_float(
        raw_interval,
        min_value=0.1,  # 100ms minimum
        max_value=3600.0,  # 1h maximum
        field_name="monitor.interval_seconds",
    )

    source = validate_enum_choice(
        monitor_data.get("source", "jcmd"),
        choices=SOURCE_TYPES,
        field_name="monitor.source",
        case_sensitive=False,
    )

    jcmd_path = validate_non_empty_string(
        monitor_data.get("jcmd_path", "jcmd"), field_name="monitor.jcmd_path"
    )

    command_timeout = validate_positive_float(
        monitor_data.get("command_timeout", 5.0),
        min_value=0.1,
        max_value=120.0,
        field_name="monitor.command_timeout",
    )

    return MonitorConfig(
        pid=pid,
        interval_seconds=interval_seconds,
        source=source,
        jcmd_path=jcmd_path,
        command_timeout=command_timeout,
    )


def validate_gelf_config(gelf_data: Dict[str, Any]) -> GelfConfig:
    """
    Validate and create a GelfConfig from the ``[gelf]`` table.

    The target itself is parsed by the transport factory; here it only has to
    be present.
    """
    raw_target = gelf_data.get("target")
    if raw_target is None:
        raise ValidationError(
            "GELF target not configured (gelf.target or --target)",
            field_name="gelf.target",
        )
    target = validate_non_empty_string(raw_target, field_name="gelf.target")

    queue_size = validate_positive_integer(
        gelf_data.get("queue_size", 512),
        min_value=1,
        max_value=1_000_000,
        field_name="gelf.queue_size",
    )
    connect_timeout = validate_positive_float(
        gelf_data.get("connect_timeout", 5.0),
        min_value=0.1,
        max_value=300.0,
        field_name="gelf.connect_timeout",
    )
    reconnect_delay = validate_positive_float(
        gelf_data.get("reconnect_delay", 1.0),
        min_value=0.0,
        max_value=300.0,
        field_name="gelf.reconnect_delay",
    )
    tcp_no_delay = validate_boolean(
        gelf_data.get("tcp_no_delay", True), field_name="gelf.tcp_no_delay"
    )
    send_buffer_size = validate_positive_integer(
        gelf_data.get("send_buffer_size", 32768),
        min_value=1024,
        field_name="gelf.send_buffer_size",
    )
    compress = validate_boolean(gelf_data.get("compress", True), field_name="gelf.compress")

    return GelfConfig(
        target=target,
        queue_size=queue_size,
        connect_timeout=connect_timeout,
        reconnect_delay=reconnect_delay,
        tcp_no_delay=tcp_no_delay,
        send_buffer_size=send_buffer_size,
        compress=compress,
    )


def _optional_label(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    return validate_non_empty_string(value, field_name=field_name)


def validate_label_config(application_data: Dict[str, Any]) -> LabelConfig:
    """Validate the optional ``[application]`` labels."""
    return LabelConfig(
        application=_optional_label(application_data.get("name"), "application.name"),
        deployment_unit=_optional_label(
            application_data.get("deployment_unit"), "application.deployment_unit"
        ),
    )


def validate_storage_config(storage_data: Dict[str, Any]) -> StorageConfig:
    """Validate the ``[storage]`` table used by the Parquet sink."""
    try:
        return StorageConfig.from_dict(storage_data)
    except ValueError as e:
        raise ValidationError(str(e), field_name="storage") from e


def merge_overrides(raw: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge dotted-key overrides (``"monitor.pid"``) into a raw config mapping.

    ``None`` values are ignored so unset command-line options never mask the
    file. The input mapping is not modified.
    """
    merged: Dict[str, Any] = {key: dict(value) if isinstance(value, dict) else value
                              for key, value in raw.items()}
    for dotted_key, value in (overrides or {}).items():
        if value is None:
            continue
        section, _, key = dotted_key.partition(".")
        if not key:
            raise ValidationError(
                f"Override key must be 'section.key', got '{dotted_key}'",
                field_name=dotted_key,
            )
        table = merged.setdefault(section, {})
        if not isinstance(table, dict):
            raise ValidationError(
                f"Configuration section '{section}' must be a table",
                field_name=section,
            )
        table[key] = value
    return merged


def validate_app_config(raw: Dict[str, Any]) -> AppConfig:
    """
    Validate a complete raw configuration mapping.

    Raises:
        ValidationError: If any section fails validation
    """
    app_config = AppConfig(
        monitor=validate_monitor_config(raw.get("monitor", {})),
        gelf=validate_gelf_config(raw.get("gelf", {})),
        labels=validate_label_config(raw.get("application", {})),
        storage=validate_storage_config(raw.get("storage", {})),
    )
    logger.debug(f"Validated configuration: {app_config}")
    return app_config
