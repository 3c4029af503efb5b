"""
Sampling and rate computation engine.

This module provides the Sampler state machine, the rate computation
functions that turn cumulative counters into loads, and the loop that drives
a sampler and dispatches its snapshots.
"""

from .exceptions import AttachError, ConnectionLost, ReadError, SamplerStateError
from .loop import LoopStats, SamplingLoop
from .rates import (
    basic_gc_accounting,
    build_snapshot,
    compute_load,
    detailed_gc_accounting,
    gc_accounting,
)
from .sampler import Sampler, SamplerState

__all__ = [
    # Errors
    "AttachError",
    "ConnectionLost",
    "ReadError",
    "SamplerStateError",
    # Rates
    "basic_gc_accounting",
    "build_snapshot",
    "compute_load",
    "detailed_gc_accounting",
    "gc_accounting",
    # State machine and loop
    "LoopStats",
    "Sampler",
    "SamplerState",
    "SamplingLoop",
]
