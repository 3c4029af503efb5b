"""
Garbage collector classification.

This module maps garbage collector names, as reported by the JVM's
GarbageCollectorMXBeans, onto the young and old generation. Generational GC
accounting is only possible when every active collector is recognized.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Tuple

logger = logging.getLogger(__name__)

YOUNG_GC_NAMES: FrozenSet[str] = frozenset({
    "Copy",
    "PS Scavenge",
    "ParNew",
    "G1 Young Generation",
})

OLD_GC_NAMES: FrozenSet[str] = frozenset({
    "MarkSweepCompact",
    "PS MarkSweep",
    "ConcurrentMarkSweep",
    "G1 Old Generation",
})


@dataclass(frozen=True)
class GcClassification:
    """Result of classifying a set of collector names."""

    young: Tuple[str, ...]
    old: Tuple[str, ...]
    # True when every collector is either young or old.
    is_detailed: bool


def classify_collectors(names: Iterable[str]) -> GcClassification:
    """Split collector names into young and old generation collectors.

    The classification is closed-world: a single unknown collector name
    disables detailed accounting for the whole read. An empty input is
    trivially covered and therefore detailed.

    Args:
        names: Collector names. Duplicates are ignored; the order of first
            appearance is kept in the result.

    Returns:
        GcClassification with the young and old collectors in input order.

    Examples:
        >>> classify_collectors(["G1 Young Generation", "G1 Old Generation"]).is_detailed
        True
        >>> classify_collectors(["G1 Young Generation", "SomeCustomGC"]).is_detailed
        False
    """
    unique_names = list(dict.fromkeys(names))
    young = tuple(name for name in unique_names if name in YOUNG_GC_NAMES)
    old = tuple(name for name in unique_names if name in OLD_GC_NAMES)
    is_detailed = len(young) + len(old) == len(unique_names)

    if not is_detailed:
        unknown = [name for name in unique_names if name not in YOUNG_GC_NAMES | OLD_GC_NAMES]
        logger.debug(f"Unclassified garbage collectors {unknown}; detailed GC accounting disabled")

    return GcClassification(young=young, old=old, is_detailed=is_detailed)
