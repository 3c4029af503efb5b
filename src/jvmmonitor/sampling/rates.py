"""
Rate computation from cumulative counters.

Loads are derived as ``(current - previous) / elapsed`` from counters that
should only ever grow. Counters can still go backwards (a counter reset, a
restarted process reusing the pid), so every load is clamped at zero; an
elapsed time that is zero or negative yields a load of zero instead of a
division.
"""

import logging
from typing import Optional

from ..classification import GcClassification, classify_collectors
from ..models import (
    BasicGcAccounting,
    DetailedGcAccounting,
    GcAccounting,
    RawCounters,
    Snapshot,
)

logger = logging.getLogger(__name__)

EMPTY_GC_ACCOUNTING = BasicGcAccounting(
    total_count=0, total_time_nanos=0, delta_count=0, load=0.0
)


def compute_load(previous: int, current: int, delta_time_nanos: int) -> float:
    """Return the clamped rate of change of a cumulative counter.

    Args:
        previous: Counter value at the previous sample.
        current: Counter value now.
        delta_time_nanos: Monotonic time between the two samples.

    Returns:
        ``max((current - previous) / delta_time_nanos, 0.0)``, or 0.0 when
        ``delta_time_nanos`` is not positive.
    """
    if delta_time_nanos <= 0:
        return 0.0
    load = (current - previous) / delta_time_nanos
    return load if load > 0.0 else 0.0


def _delta(previous: int, current: int) -> int:
    return max(current - previous, 0)


def _has_gc_baseline(previous: Optional[GcAccounting]) -> bool:
    """Return True if ``previous`` carries real cumulative GC totals.

    A cycle without GC information stores ``EMPTY_GC_ACCOUNTING``; its zero
    totals are not a baseline, so the next cycle starts a fresh one.
    """
    return previous is not None and previous is not EMPTY_GC_ACCOUNTING


def basic_gc_accounting(
    counters: RawCounters,
    previous: Optional[GcAccounting],
    delta_time_nanos: int,
) -> BasicGcAccounting:
    """Sum all collectors into one GC figure.

    ``previous`` may be either variant; only the totals common to both are
    used. Without a previous accounting, or after a cycle without GC
    information, the result is a zero-rate baseline.
    """
    if counters.collectors is None:
        return EMPTY_GC_ACCOUNTING

    total_count = counters.total_gc_count
    total_time = counters.total_gc_time_nanos
    if not _has_gc_baseline(previous):
        return BasicGcAccounting(total_count, total_time, 0, 0.0)

    return BasicGcAccounting(
        total_count=total_count,
        total_time_nanos=total_time,
        delta_count=_delta(previous.total_count, total_count),
        load=compute_load(previous.total_time_nanos, total_time, delta_time_nanos),
    )


def detailed_gc_accounting(
    counters: RawCounters,
    classification: GcClassification,
    previous: Optional[GcAccounting],
    delta_time_nanos: int,
) -> DetailedGcAccounting:
    """Compute GC figures with a young/old generation breakdown.

    Deltas are only taken against a previous detailed accounting. When
    ``previous`` is None or basic, this cycle establishes a fresh baseline
    in which every delta and load is zero, like the initial sample.
    """
    collectors = counters.collectors or {}

    young_count = sum(collectors[name].collection_count for name in classification.young)
    young_time = sum(collectors[name].collection_time_nanos for name in classification.young)
    old_count = sum(collectors[name].collection_count for name in classification.old)
    old_time = sum(collectors[name].collection_time_nanos for name in classification.old)

    total_count = young_count + old_count
    total_time = young_time + old_time

    if isinstance(previous, DetailedGcAccounting):
        delta_count = _delta(previous.total_count, total_count)
        load = compute_load(previous.total_time_nanos, total_time, delta_time_nanos)
        young_delta_count = _delta(previous.young_count, young_count)
        old_delta_count = _delta(previous.old_count, old_count)
        young_load = compute_load(previous.young_time_nanos, young_time, delta_time_nanos)
        old_load = compute_load(previous.old_time_nanos, old_time, delta_time_nanos)
    else:
        delta_count, load = 0, 0.0
        young_delta_count, old_delta_count = 0, 0
        young_load, old_load = 0.0, 0.0

    return DetailedGcAccounting(
        total_count=total_count,
        total_time_nanos=total_time,
        delta_count=delta_count,
        load=load,
        young_count=young_count,
        old_count=old_count,
        young_delta_count=young_delta_count,
        old_delta_count=old_delta_count,
        young_time_nanos=young_time,
        old_time_nanos=old_time,
        young_load=young_load,
        old_load=old_load,
        young_collectors=classification.young,
        old_collectors=classification.old,
    )


def gc_accounting(
    counters: RawCounters,
    previous: Optional[GcAccounting],
    delta_time_nanos: int,
) -> GcAccounting:
    """Pick the GC accounting variant for this read and compute it."""
    if counters.collectors is None:
        return EMPTY_GC_ACCOUNTING

    classification = classify_collectors(counters.collectors)
    if classification.is_detailed:
        if previous is not None and not isinstance(previous, DetailedGcAccounting):
            logger.info("All garbage collectors recognized; starting generational GC accounting")
        return detailed_gc_accounting(counters, classification, previous, delta_time_nanos)

    if isinstance(previous, DetailedGcAccounting):
        logger.info("Unrecognized garbage collector appeared; falling back to basic GC accounting")
    return basic_gc_accounting(counters, previous, delta_time_nanos)


def build_snapshot(counters: RawCounters, previous: Optional[Snapshot] = None) -> Snapshot:
    """Build the snapshot for one counter read.

    Args:
        counters: The fresh counter read.
        previous: The snapshot of the previous cycle, or None for the first
            sample after attaching, in which case every rate is exactly 0.

    Returns:
        A new immutable Snapshot.
    """
    if previous is None:
        delta_time = 0
        cpu_load = 0.0
        gc = gc_accounting(counters, None, delta_time)
    else:
        delta_time = counters.timestamp_nanos - previous.sampled_at_nanos
        if delta_time <= 0:
            logger.warning(
                f"Non-positive time between samples ({delta_time} ns); reporting zero load"
            )
        cpu_load = compute_load(
            previous.total_cpu_time_nanos, counters.total_cpu_time_nanos, delta_time
        )
        gc = gc_accounting(counters, previous.gc, delta_time)

    return Snapshot(
        sampled_at_nanos=counters.timestamp_nanos,
        cpu_load=cpu_load,
        gc=gc,
        total_cpu_time_nanos=counters.total_cpu_time_nanos,
        heap=counters.heap,
        non_heap=counters.non_heap,
        loaded_classes=counters.loaded_class_count,
        thread_count=counters.thread_count,
        daemon_thread_count=counters.daemon_thread_count,
        host_identity=counters.host_identity,
    )
