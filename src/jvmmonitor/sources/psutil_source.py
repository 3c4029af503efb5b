"""
Counter source implementation using the 'psutil' library.

This source works with any local process. It reports CPU time, thread count
and process memory; it has no garbage collector or class loading
information, so snapshots built from it always use basic GC accounting with
zero figures.
"""

import logging
import socket
import time
from typing import Callable, Optional

import psutil

from ..models import MemoryUsage, RawCounters
from ..sampling.exceptions import AttachError, ReadError
from .base import CounterSource

logger = logging.getLogger(__name__)

NANOS_PER_SECOND = 1_000_000_000


def cpu_time_nanos(process: psutil.Process) -> int:
    """Return the user plus system CPU time of ``process`` in nanoseconds."""
    cpu_times = process.cpu_times()
    return int(round((cpu_times.user + cpu_times.system) * NANOS_PER_SECOND))


class PsutilCounterSource(CounterSource):
    """
    Reads process-level counters through psutil.

    Process memory is reported in the heap figures: resident set size as
    ``used`` and virtual size as ``committed``. Non-heap figures stay zero.
    """

    def __init__(self, pid: int, clock: Callable[[], int] = time.monotonic_ns):
        """
        Args:
            pid: Process to monitor.
            clock: Monotonic clock in nanoseconds, replaceable in tests.
        """
        super().__init__(pid)
        self._clock = clock
        self._process: Optional[psutil.Process] = None
        self._hostname = socket.gethostname()

    def connect(self) -> None:
        try:
            self._process = psutil.Process(self.pid)
            # Touch the process once so permission problems surface now.
            self._process.cpu_times()
        except psutil.NoSuchProcess as e:
            self._process = None
            raise AttachError(f"No process with PID {self.pid} found") from e
        except psutil.AccessDenied as e:
            self._process = None
            raise AttachError(f"Access to process with PID {self.pid} denied") from e

    def read(self) -> RawCounters:
        process = self._process
        if process is None:
            raise ReadError(f"Not connected to {self.description}")

        try:
            if not process.is_running():
                raise ReadError(f"{self.description} is no longer running")

            timestamp = self._clock()
            total_cpu = self.read_optional(
                "cpu_time", lambda: cpu_time_nanos(process), 0, psutil.AccessDenied
            )
            heap = self.read_optional(
                "memory", lambda: self._memory_usage(process), MemoryUsage(), psutil.AccessDenied
            )
            thread_count = self.read_optional(
                "threads", process.num_threads, 0, psutil.AccessDenied
            )
        except psutil.NoSuchProcess as e:
            raise ReadError(f"{self.description} disappeared") from e

        return RawCounters(
            timestamp_nanos=timestamp,
            total_cpu_time_nanos=total_cpu,
            collectors=None,
            heap=heap,
            thread_count=thread_count,
            host_identity=self._hostname,
        )

    @staticmethod
    def _memory_usage(process: psutil.Process) -> MemoryUsage:
        mem_info = process.memory_info()
        return MemoryUsage(committed=mem_info.vms, used=mem_info.rss, max=0)

    def disconnect(self) -> None:
        self._process = None
