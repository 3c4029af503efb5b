"""
Factory for creating counter sources.
"""

import logging

from ..models import MonitorConfig
from .base import CounterSource
from .jcmd_source import JcmdCounterSource
from .psutil_source import PsutilCounterSource

logger = logging.getLogger(__name__)

SUPPORTED_SOURCES = ("jcmd", "psutil")


def create_counter_source(monitor_config: MonitorConfig) -> CounterSource:
    """
    Create a counter source based on the monitor configuration.

    Args:
        monitor_config: Validated monitor settings. ``pid`` must be set.

    Returns:
        An unconnected CounterSource instance

    Raises:
        ValueError: If the source type is unsupported or no pid is configured
    """
    if monitor_config.pid is None:
        raise ValueError("Cannot create a counter source without a process id")

    source_type = monitor_config.source.lower()
    if source_type == "jcmd":
        logger.debug(f"Creating JcmdCounterSource using '{monitor_config.jcmd_path}'")
        return JcmdCounterSource(
            monitor_config.pid,
            jcmd_path=monitor_config.jcmd_path,
            timeout=monitor_config.command_timeout,
        )
    elif source_type == "psutil":
        logger.debug("Creating PsutilCounterSource")
        return PsutilCounterSource(monitor_config.pid)
    else:
        raise ValueError(
            f"Unsupported counter source: {monitor_config.source}. "
            f"Supported sources are: {', '.join(SUPPORTED_SOURCES)}"
        )
