"""
Pytest configuration and shared fixtures for the jvmmonitor test suite.

This module provides common fixtures, fake counter sources and transports,
and configuration files for all test modules.
"""

import sys
import tempfile
import shutil
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from jvmmonitor.models import CollectorCounters, MemoryUsage, RawCounters  # noqa: E402
from jvmmonitor.sampling import ReadError  # noqa: E402
from jvmmonitor.sources.base import CounterSource  # noqa: E402
from jvmmonitor.transports.base import AbstractTransport  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_config_data():
    """Sample raw configuration data, as read from config.toml."""
    return {
        "monitor": {
            "pid": 4242,
            "interval_seconds": 1.0,
            "source": "jcmd",
            "jcmd_path": "jcmd",
            "command_timeout": 5.0,
        },
        "gelf": {
            "target": "udp://127.0.0.1:12201",
            "queue_size": 16,
            "connect_timeout": 2.0,
            "reconnect_delay": 0.5,
            "tcp_no_delay": True,
            "send_buffer_size": 65536,
            "compress": True,
        },
        "application": {
            "name": "billing",
            "deployment_unit": "blue",
        },
        "storage": {
            "compression": "zstd",
            "flush_every": 10,
        },
    }


@pytest.fixture
def config_file(temp_dir, sample_config_data):
    """Write the sample configuration to a temporary config.toml."""
    import toml

    path = temp_dir / "config.toml"
    with open(path, "w") as f:
        toml.dump(sample_config_data, f)
    return path


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear the configuration cache after each test."""
    from jvmmonitor.config import clear_config_cache

    yield
    clear_config_cache()


# ============================================================================
# Fakes
# ============================================================================


def make_counters(
    timestamp: int = 0,
    cpu: int = 0,
    collectors: Optional[Dict[str, tuple]] = None,
    heap_used: int = 0,
    threads: int = 0,
    host: str = "test-host",
) -> RawCounters:
    """Build RawCounters; ``collectors`` maps name to (count, time_nanos)."""
    return RawCounters(
        timestamp_nanos=timestamp,
        total_cpu_time_nanos=cpu,
        collectors=None if collectors is None else {
            name: CollectorCounters(count, time_nanos)
            for name, (count, time_nanos) in collectors.items()
        },
        heap=MemoryUsage(committed=heap_used * 2, used=heap_used, max=heap_used * 4),
        non_heap=MemoryUsage(committed=100, used=50, max=0),
        loaded_class_count=1000,
        thread_count=threads,
        daemon_thread_count=threads // 2,
        host_identity=host,
    )


class FakeCounterSource(CounterSource):
    """Counter source that replays a list of reads.

    An exception instance in ``reads`` is raised instead of returned.
    """

    def __init__(self, reads: List, connect_error: Optional[Exception] = None,
                 disconnect_error: Optional[Exception] = None):
        super().__init__(pid=4242)
        self.reads = list(reads)
        self.connect_error = connect_error
        self.disconnect_error = disconnect_error
        self.connected = False
        self.disconnect_calls = 0

    def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    def read(self) -> RawCounters:
        if not self.reads:
            raise ReadError("no more reads")
        item = self.reads.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False
        if self.disconnect_error is not None:
            raise self.disconnect_error


class RecordingTransport(AbstractTransport):
    """Transport that records accepted snapshots; ``accept`` scripts try_send results."""

    def __init__(self, accept: Optional[List[bool]] = None):
        super().__init__({"application": "test"})
        self.accept = list(accept) if accept is not None else None
        self.sent = []
        self.offered = 0

    def send(self, snapshot) -> None:
        self._ensure_open()
        self.sent.append(snapshot)

    def try_send(self, snapshot) -> bool:
        self.offered += 1
        accepted = self.accept.pop(0) if self.accept else self.accept is None
        if accepted:
            self.sent.append(snapshot)
        return accepted


@pytest.fixture
def recording_transport():
    return RecordingTransport()
