"""
Snapshot data models.

A Snapshot is the output of one sampling cycle. Its garbage collection part
is one of two variants: ``BasicGcAccounting`` when collectors cannot be
split into generations, ``DetailedGcAccounting`` when every collector is a
known young or old generation collector. Consumers dispatch on the variant
with ``isinstance``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from .counters import MemoryUsage


@dataclass(frozen=True)
class BasicGcAccounting:
    """Garbage collection figures summed over all collectors."""

    # Cumulative number of collections.
    total_count: int
    # Cumulative collection time in nanoseconds.
    total_time_nanos: int
    # Collections since the previous sample.
    delta_count: int
    # Fraction of elapsed time spent collecting since the previous sample.
    load: float

    def to_record(self) -> Dict[str, Any]:
        return {
            "gc_accounting": "basic",
            "gc_total_count": self.total_count,
            "gc_total_time_nanos": self.total_time_nanos,
            "gc_delta_count": self.delta_count,
            "gc_load": self.load,
        }


@dataclass(frozen=True)
class DetailedGcAccounting:
    """Garbage collection figures with a young/old generation breakdown."""

    total_count: int
    total_time_nanos: int
    delta_count: int
    load: float
    young_count: int
    old_count: int
    young_delta_count: int
    old_delta_count: int
    young_time_nanos: int
    old_time_nanos: int
    young_load: float
    old_load: float
    young_collectors: Tuple[str, ...]
    old_collectors: Tuple[str, ...]

    def to_record(self) -> Dict[str, Any]:
        return {
            "gc_accounting": "detailed",
            "gc_total_count": self.total_count,
            "gc_total_time_nanos": self.total_time_nanos,
            "gc_delta_count": self.delta_count,
            "gc_load": self.load,
            "gc_young_count": self.young_count,
            "gc_old_count": self.old_count,
            "gc_young_delta_count": self.young_delta_count,
            "gc_old_delta_count": self.old_delta_count,
            "gc_young_time_nanos": self.young_time_nanos,
            "gc_old_time_nanos": self.old_time_nanos,
            "gc_young_load": self.young_load,
            "gc_old_load": self.old_load,
            "gc_young_collectors": ", ".join(self.young_collectors),
            "gc_old_collectors": ", ".join(self.old_collectors),
        }


GcAccounting = Union[BasicGcAccounting, DetailedGcAccounting]


@dataclass(frozen=True)
class Snapshot:
    """
    One fully computed sampling cycle.

    Snapshots are immutable. The sampler keeps the most recent one to compute
    the next deltas; transports may keep or drop the ones handed to them.
    """

    # Monotonic time of the underlying counter read, in nanoseconds.
    sampled_at_nanos: int
    cpu_load: float
    gc: GcAccounting
    # Cumulative CPU time, carried for the next delta.
    total_cpu_time_nanos: int
    heap: MemoryUsage
    non_heap: MemoryUsage
    loaded_classes: int
    thread_count: int
    daemon_thread_count: int
    host_identity: str

    @property
    def is_detailed(self) -> bool:
        return isinstance(self.gc, DetailedGcAccounting)

    def to_record(self) -> Dict[str, Any]:
        """
        Flatten the snapshot into a plain dictionary.

        Basic snapshots carry the generation columns as ``None`` so records
        of both variants share one schema.
        """
        record: Dict[str, Any] = {
            "sampled_at_nanos": self.sampled_at_nanos,
            "host_identity": self.host_identity,
            "cpu_load": self.cpu_load,
            "total_cpu_time_nanos": self.total_cpu_time_nanos,
            "heap_committed": self.heap.committed,
            "heap_used": self.heap.used,
            "heap_max": self.heap.max,
            "non_heap_committed": self.non_heap.committed,
            "non_heap_used": self.non_heap.used,
            "non_heap_max": self.non_heap.max,
            "loaded_classes": self.loaded_classes,
            "thread_count": self.thread_count,
            "daemon_thread_count": self.daemon_thread_count,
        }
        record.update(dict.fromkeys(DETAILED_ONLY_FIELDS))
        record.update(self.gc.to_record())
        return record


DETAILED_ONLY_FIELDS: Tuple[str, ...] = (
    "gc_young_count",
    "gc_old_count",
    "gc_young_delta_count",
    "gc_old_delta_count",
    "gc_young_time_nanos",
    "gc_old_time_nanos",
    "gc_young_load",
    "gc_old_load",
    "gc_young_collectors",
    "gc_old_collectors",
)
