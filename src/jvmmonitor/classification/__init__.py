"""
Garbage collector classification for the jvmmonitor package.

This module decides which collectors belong to the young and old generation
and whether generational GC accounting is possible.
"""

from .classifier import (
    OLD_GC_NAMES,
    YOUNG_GC_NAMES,
    GcClassification,
    classify_collectors,
)

__all__ = [
    "OLD_GC_NAMES",
    "YOUNG_GC_NAMES",
    "GcClassification",
    "classify_collectors",
]
