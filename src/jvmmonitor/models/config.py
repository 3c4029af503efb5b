"""
Configuration data models.

This module contains the configuration structures for the sampled process,
the event transport, the labels attached to every event, and the storage
sink.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..config.storage_config import StorageConfig


@dataclass
class MonitorConfig:
    """
    Configuration of the sampler, loaded from the ``[monitor]`` table.
    """

    # Process id of the monitored process. None until set by file or CLI.
    pid: Optional[int]
    # Seconds between the start of two sampling cycles.
    interval_seconds: float
    # Counter source implementation: "jcmd" or "psutil".
    source: str = "jcmd"
    # Executable used by the jcmd counter source.
    jcmd_path: str = "jcmd"
    # Upper bound, in seconds, for one jcmd invocation.
    command_timeout: float = 5.0


@dataclass
class GelfConfig:
    """
    Configuration of the event transport, loaded from the ``[gelf]`` table.
    """

    # udp://host:port, tcp://host:port, stdout:// or parquet://<path>
    target: str
    queue_size: int = 512
    connect_timeout: float = 5.0
    reconnect_delay: float = 1.0
    tcp_no_delay: bool = True
    send_buffer_size: int = 32768
    compress: bool = True


@dataclass
class LabelConfig:
    """
    Labels added to every emitted event, loaded from ``[application]``.
    """

    application: Optional[str] = None
    deployment_unit: Optional[str] = None

    def as_fields(self) -> Dict[str, str]:
        """Return the configured labels keyed by event field name."""
        fields: Dict[str, str] = {}
        if self.application:
            fields["application"] = self.application
        if self.deployment_unit:
            fields["deployment_unit"] = self.deployment_unit
        return fields


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    monitor: MonitorConfig
    gelf: GelfConfig
    labels: LabelConfig = field(default_factory=LabelConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
