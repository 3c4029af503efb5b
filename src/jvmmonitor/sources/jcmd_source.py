"""
Counter source implementation using the JDK's 'jcmd' tool.

This module provides JcmdCounterSource, which runs
``jcmd <pid> PerfCounter.print`` on every read and parses the JVM's
performance counters (garbage collectors, heap generations, metaspace,
threads, loaded classes). Process CPU time is not exported as a performance
counter and is read through psutil instead.
"""

import logging
import re
import socket
import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Union

import psutil

from ..models import CollectorCounters, MemoryUsage, RawCounters
from ..sampling.exceptions import AttachError, ReadError
from ..system.commands import check_jcmd_installed, run_command
from .base import CounterSource
from .psutil_source import NANOS_PER_SECOND, cpu_time_nanos

logger = logging.getLogger(__name__)

PERF_COUNTER_COMMAND = "PerfCounter.print"

# Performance-counter collector names differ from the GarbageCollectorMXBean
# names the generation tables use.
PERFDATA_COLLECTOR_NAMES: Dict[str, str] = {
    "Copy": "Copy",
    "MSC": "MarkSweepCompact",
    "PSScavenge": "PS Scavenge",
    "PSParallelCompact": "PS MarkSweep",
    "ParNew": "ParNew",
    "CMS": "ConcurrentMarkSweep",
    "G1 incremental collections": "G1 Young Generation",
    "G1 stop-the-world full collections": "G1 Old Generation",
}

HEAP_GENERATION_NAMES = ("new", "young", "old")

_COUNTER_LINE = re.compile(r"^([A-Za-z0-9_.]+)=(.*)$")
_COLLECTOR_KEY = re.compile(r"^sun\.gc\.collector\.(\d+)\.(name|invocations|time)$")
_GENERATION_KEY = re.compile(r"^sun\.gc\.generation\.(\d+)\.(name|capacity|maxCapacity)$")
_SPACE_USED_KEY = re.compile(r"^sun\.gc\.generation\.(\d+)\.space\.\d+\.used$")

PerfValue = Union[int, str]


def parse_perf_counters(output: str) -> Dict[str, PerfValue]:
    """Parse ``PerfCounter.print`` output into a name to value mapping.

    Quoted values become strings, integral values become ints and anything
    else is kept as the raw string. Lines that are not ``name=value`` (the
    leading ``<pid>:`` line, blank lines) are skipped.
    """
    counters: Dict[str, PerfValue] = {}
    for line in output.splitlines():
        match = _COUNTER_LINE.match(line.strip())
        if not match:
            continue
        name, raw_value = match.groups()
        if len(raw_value) >= 2 and raw_value.startswith('"') and raw_value.endswith('"'):
            counters[name] = raw_value[1:-1]
            continue
        try:
            counters[name] = int(raw_value)
        except ValueError:
            counters[name] = raw_value
    return counters


def _int_counter(counters: Dict[str, PerfValue], name: str) -> int:
    value = counters.get(name, 0)
    return value if isinstance(value, int) else 0


def extract_collectors(counters: Dict[str, PerfValue]) -> Optional[Dict[str, CollectorCounters]]:
    """Build per-collector counters from parsed performance counters.

    Collection times are reported in high-resolution timer ticks and are
    converted to nanoseconds with ``sun.os.hrt.frequency``. Returns None when
    the frequency is missing, since times cannot be converted then.
    """
    frequency = _int_counter(counters, "sun.os.hrt.frequency")
    if frequency <= 0:
        return None

    by_index: Dict[str, Dict[str, PerfValue]] = defaultdict(dict)
    for name, value in counters.items():
        match = _COLLECTOR_KEY.match(name)
        if match:
            index, attribute = match.groups()
            by_index[index][attribute] = value

    collectors: Dict[str, CollectorCounters] = {}
    for index in sorted(by_index, key=int):
        attributes = by_index[index]
        perf_name = attributes.get("name")
        if not isinstance(perf_name, str):
            continue
        invocations = attributes.get("invocations", 0)
        ticks = attributes.get("time", 0)
        name = PERFDATA_COLLECTOR_NAMES.get(perf_name, perf_name)
        collectors[name] = CollectorCounters(
            collection_count=invocations if isinstance(invocations, int) else 0,
            collection_time_nanos=(ticks * NANOS_PER_SECOND // frequency) if isinstance(ticks, int) else 0,
        )
    return collectors


def extract_heap(counters: Dict[str, PerfValue]) -> MemoryUsage:
    """Sum the young and old generations into heap usage figures."""
    names: Dict[str, PerfValue] = {}
    capacity: Dict[str, int] = defaultdict(int)
    max_capacity: Dict[str, int] = defaultdict(int)
    used: Dict[str, int] = defaultdict(int)

    for name, value in counters.items():
        generation = _GENERATION_KEY.match(name)
        if generation:
            index, attribute = generation.groups()
            if attribute == "name":
                names[index] = value
            elif isinstance(value, int):
                target = capacity if attribute == "capacity" else max_capacity
                target[index] = value
            continue
        space = _SPACE_USED_KEY.match(name)
        if space and isinstance(value, int):
            used[space.group(1)] += value

    indices = set(capacity) | set(max_capacity) | set(used) | set(names)
    heap_indices: List[str] = [
        index for index in indices
        if names.get(index) in HEAP_GENERATION_NAMES or (index not in names and index in ("0", "1"))
    ]
    return MemoryUsage(
        committed=sum(capacity[i] for i in heap_indices),
        used=sum(used[i] for i in heap_indices),
        max=sum(max_capacity[i] for i in heap_indices),
    )


def extract_non_heap(counters: Dict[str, PerfValue]) -> MemoryUsage:
    """Report metaspace usage as the non-heap figures."""
    return MemoryUsage(
        committed=_int_counter(counters, "sun.gc.metaspace.capacity"),
        used=_int_counter(counters, "sun.gc.metaspace.used"),
        max=_int_counter(counters, "sun.gc.metaspace.maxCapacity"),
    )


def extract_loaded_classes(counters: Dict[str, PerfValue]) -> int:
    """Currently loaded classes, including classes from the shared archive."""
    loaded = (
        _int_counter(counters, "java.cls.loadedClasses")
        + _int_counter(counters, "java.cls.sharedLoadedClasses")
        - _int_counter(counters, "java.cls.unloadedClasses")
        - _int_counter(counters, "java.cls.sharedUnloadedClasses")
    )
    return max(loaded, 0)


class JcmdCounterSource(CounterSource):
    """
    Reads JVM counters through ``jcmd <pid> PerfCounter.print``.

    Attributes:
        jcmd_path: The jcmd executable.
        timeout: Upper bound, in seconds, for one jcmd invocation.
    """

    def __init__(
        self,
        pid: int,
        jcmd_path: str = "jcmd",
        timeout: float = 5.0,
        clock: Callable[[], int] = time.monotonic_ns,
    ):
        super().__init__(pid)
        self.jcmd_path = jcmd_path
        self.timeout = timeout
        self._clock = clock
        self._process: Optional[psutil.Process] = None
        self._hostname = socket.gethostname()

    @property
    def description(self) -> str:
        return f"JVM with PID {self.pid}"

    def _perf_counter_command(self) -> List[str]:
        return [self.jcmd_path, str(self.pid), PERF_COUNTER_COMMAND]

    def connect(self) -> None:
        if not check_jcmd_installed(self.jcmd_path):
            raise AttachError(
                f"'{self.jcmd_path}' not found; install a JDK or use the psutil source"
            )
        try:
            self._process = psutil.Process(self.pid)
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            raise AttachError(f"Unable to connect to virtual machine with PID {self.pid}") from e

        return_code, stdout, stderr = run_command(self._perf_counter_command(), timeout=self.timeout)
        if return_code != 0 or not parse_perf_counters(stdout):
            self._process = None
            detail = (stderr or stdout).strip().splitlines()
            reason = detail[-1] if detail else f"exit code {return_code}"
            raise AttachError(f"Connection to virtual machine with PID {self.pid} refused: {reason}")

    def _process_alive(self) -> bool:
        process = self._process
        if process is None:
            return False
        try:
            return process.is_running() and process.status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return False

    def read(self) -> RawCounters:
        process = self._process
        if process is None:
            raise ReadError(f"Not connected to {self.description}")

        timestamp = self._clock()
        return_code, stdout, stderr = run_command(self._perf_counter_command(), timeout=self.timeout)
        if not self._process_alive():
            raise ReadError(f"{self.description} is no longer running")

        if return_code == 0:
            counters = parse_perf_counters(stdout)
        else:
            logger.warning(
                f"jcmd failed for {self.description} (exit code {return_code}); "
                "reporting this cycle without JVM counters"
            )
            counters = {}

        try:
            total_cpu = self.read_optional(
                "cpu_time", lambda: cpu_time_nanos(process), 0, psutil.AccessDenied
            )
        except psutil.NoSuchProcess as e:
            raise ReadError(f"{self.description} disappeared") from e

        return RawCounters(
            timestamp_nanos=timestamp,
            total_cpu_time_nanos=total_cpu,
            collectors=extract_collectors(counters),
            heap=extract_heap(counters),
            non_heap=extract_non_heap(counters),
            loaded_class_count=extract_loaded_classes(counters),
            thread_count=_int_counter(counters, "java.threads.live"),
            daemon_thread_count=_int_counter(counters, "java.threads.daemon"),
            host_identity=self._hostname,
        )

    def disconnect(self) -> None:
        self._process = None
