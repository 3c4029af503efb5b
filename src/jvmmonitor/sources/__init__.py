"""
Counter sources for monitored processes.

A counter source connects to one process and reads its cumulative counters:
- JcmdCounterSource: JVM performance counters through the JDK's jcmd tool
- PsutilCounterSource: process-level counters for any local process
"""

from .base import CounterSource
from .factory import SUPPORTED_SOURCES, create_counter_source
from .jcmd_source import JcmdCounterSource, parse_perf_counters
from .psutil_source import PsutilCounterSource

__all__ = [
    "CounterSource",
    "JcmdCounterSource",
    "PsutilCounterSource",
    "SUPPORTED_SOURCES",
    "create_counter_source",
    "parse_perf_counters",
]
