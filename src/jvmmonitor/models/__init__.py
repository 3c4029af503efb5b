"""
Data models for the monitoring system.

Configuration Models:
- Sampler, transport, label and storage settings

Counter Models:
- Raw cumulative counters as read from a counter source

Snapshot Models:
- Computed sampling cycle output and its garbage collection variants
"""

# Configuration models
from .config import AppConfig, GelfConfig, LabelConfig, MonitorConfig

# Counter models
from .counters import UNKNOWN_HOST, CollectorCounters, MemoryUsage, RawCounters

# Snapshot models
from .snapshot import (
    BasicGcAccounting,
    DetailedGcAccounting,
    GcAccounting,
    Snapshot,
)

__all__ = [
    # Configuration
    "AppConfig",
    "GelfConfig",
    "LabelConfig",
    "MonitorConfig",
    # Counters
    "UNKNOWN_HOST",
    "CollectorCounters",
    "MemoryUsage",
    "RawCounters",
    # Snapshots
    "BasicGcAccounting",
    "DetailedGcAccounting",
    "GcAccounting",
    "Snapshot",
]
