"""
jvmmonitor: JVM runtime monitoring agent.

This package attaches to a running JVM (or any local process, with a reduced
counter set), samples its runtime counters at a fixed interval, derives CPU
and garbage collection loads from consecutive samples, and emits every
snapshot as a GELF event.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Counter, snapshot and configuration data structures
- validation: Input validation and error handling
- system: Command execution and Java process discovery
- classification: Young/old garbage collector classification
- sources: Counter sources (jcmd, psutil)
- sampling: Sampler state machine, load computation and the sampling loop
- transports: GELF over UDP/TCP, stdout and Parquet sinks
- storage: Parquet storage for recorded snapshots
- cli: Command-line interface

Usage:
    From command line:
        jvmmonitor --pid 12345 --target udp://graylog:12201

    Programmatically:
        from jvmmonitor import Sampler, SamplingLoop, create_transport
        from jvmmonitor.sources import JcmdCounterSource
        sampler = Sampler(JcmdCounterSource(12345))
        sampler.attach()
        SamplingLoop(sampler, create_transport("stdout://"), 1.0).run()
"""

# Configuration is imported first: the configuration models depend on it.
from .config import get_config, clear_config_cache, load_config, set_config_path

from .models import (
    AppConfig,
    BasicGcAccounting,
    DetailedGcAccounting,
    GcAccounting,
    MemoryUsage,
    RawCounters,
    Snapshot,
)

from .classification import classify_collectors
from .sampling import (
    AttachError,
    ConnectionLost,
    ReadError,
    Sampler,
    SamplerState,
    SamplerStateError,
    SamplingLoop,
    compute_load,
)
from .transports import TransportError, create_transport
from .validation import ValidationError

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "get_config",
    "clear_config_cache",
    "load_config",
    "set_config_path",
    "AppConfig",
    # Models
    "BasicGcAccounting",
    "DetailedGcAccounting",
    "GcAccounting",
    "MemoryUsage",
    "RawCounters",
    "Snapshot",
    # Engine
    "classify_collectors",
    "compute_load",
    "Sampler",
    "SamplerState",
    "SamplingLoop",
    "create_transport",
    # Errors
    "AttachError",
    "ConnectionLost",
    "ReadError",
    "SamplerStateError",
    "TransportError",
    "ValidationError",
]
