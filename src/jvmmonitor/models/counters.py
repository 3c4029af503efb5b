"""
Raw counter data models.

This module contains the structures a counter source produces on every read:
cumulative, monotonically non-decreasing counters together with a few
instantaneous gauges (memory usage, thread and class counts).
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

UNKNOWN_HOST = "<unknown>"


@dataclass(frozen=True)
class CollectorCounters:
    """Cumulative counters of a single garbage collector."""

    # Number of collections performed since the process started.
    collection_count: int = 0
    # Accumulated collection time, in nanoseconds.
    collection_time_nanos: int = 0


@dataclass(frozen=True)
class MemoryUsage:
    """
    Usage of one memory area, in bytes.

    A value of 0 means the figure is unknown (for ``max`` it may also mean
    the area is unbounded).
    """

    committed: int = 0
    used: int = 0
    max: int = 0


@dataclass(frozen=True)
class RawCounters:
    """
    One instantaneous read from a counter source.

    Every field except ``timestamp_nanos`` may be unavailable on a given read
    and then carries its zero/empty default. ``collectors`` is ``None`` when
    the source could not supply garbage collector information at all, which
    is different from an empty mapping (a runtime without collectors).
    """

    # Monotonic clock reading taken with the counters, in nanoseconds.
    timestamp_nanos: int
    total_cpu_time_nanos: int = 0
    collectors: Optional[Dict[str, CollectorCounters]] = None
    heap: MemoryUsage = field(default_factory=MemoryUsage)
    non_heap: MemoryUsage = field(default_factory=MemoryUsage)
    loaded_class_count: int = 0
    thread_count: int = 0
    daemon_thread_count: int = 0
    host_identity: str = UNKNOWN_HOST

    @property
    def total_gc_count(self) -> int:
        """Sum of the collection counts of all collectors."""
        if not self.collectors:
            return 0
        return sum(c.collection_count for c in self.collectors.values())

    @property
    def total_gc_time_nanos(self) -> int:
        """Sum of the collection times of all collectors."""
        if not self.collectors:
            return 0
        return sum(c.collection_time_nanos for c in self.collectors.values())
