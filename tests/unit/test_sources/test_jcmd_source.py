"""
Unit tests for the jcmd counter source and performance counter parsing.
"""

from unittest.mock import Mock, patch

import psutil
import pytest

from jvmmonitor.models import MemoryUsage
from jvmmonitor.sampling import AttachError, ReadError
from jvmmonitor.sources import JcmdCounterSource, parse_perf_counters
from jvmmonitor.sources.jcmd_source import (
    extract_collectors,
    extract_heap,
    extract_loaded_classes,
    extract_non_heap,
)

PERF_OUTPUT = """4242:
sun.os.hrt.frequency=1000000000
sun.gc.collector.0.name="G1 incremental collections"
sun.gc.collector.0.invocations=25
sun.gc.collector.0.time=150000000
sun.gc.collector.1.name="G1 stop-the-world full collections"
sun.gc.collector.1.invocations=1
sun.gc.collector.1.time=50000000
sun.gc.collector.2.name="G1 stop-the-world phases"
sun.gc.collector.2.invocations=3
sun.gc.collector.2.time=1000
sun.gc.generation.0.name="young"
sun.gc.generation.0.capacity=1000
sun.gc.generation.0.maxCapacity=5000
sun.gc.generation.0.space.0.used=100
sun.gc.generation.0.space.1.used=50
sun.gc.generation.1.name="old"
sun.gc.generation.1.capacity=2000
sun.gc.generation.1.maxCapacity=6000
sun.gc.generation.1.space.0.used=700
sun.gc.metaspace.capacity=300
sun.gc.metaspace.used=250
sun.gc.metaspace.maxCapacity=9000
java.threads.live=31
java.threads.daemon=12
java.cls.loadedClasses=4000
java.cls.sharedLoadedClasses=1000
java.cls.unloadedClasses=100
java.cls.sharedUnloadedClasses=0
java.property.java.vm.name="OpenJDK 64-Bit Server VM"
"""

SERIAL_OUTPUT = """sun.os.hrt.frequency=1000
sun.gc.collector.0.name="Copy"
sun.gc.collector.0.invocations=4
sun.gc.collector.0.time=20
sun.gc.collector.1.name="MSC"
sun.gc.collector.1.invocations=1
sun.gc.collector.1.time=3
sun.gc.generation.0.name="new"
sun.gc.generation.0.capacity=10
sun.gc.generation.0.maxCapacity=20
sun.gc.generation.0.space.0.used=4
sun.gc.generation.1.name="old"
sun.gc.generation.1.capacity=30
sun.gc.generation.1.maxCapacity=40
sun.gc.generation.1.space.0.used=6
"""


@pytest.mark.unit
class TestParsePerfCounters:
    """Test cases for parse_perf_counters and the extractors."""

    def test_parses_strings_and_integers(self):
        counters = parse_perf_counters(PERF_OUTPUT)

        assert counters["sun.os.hrt.frequency"] == 1_000_000_000
        assert counters["sun.gc.collector.0.name"] == "G1 incremental collections"
        assert counters["java.property.java.vm.name"] == "OpenJDK 64-Bit Server VM"
        assert "4242:" not in counters

    def test_empty_output(self):
        assert parse_perf_counters("") == {}

    def test_collectors_use_management_names(self):
        collectors = extract_collectors(parse_perf_counters(SERIAL_OUTPUT))

        assert list(collectors) == ["Copy", "MarkSweepCompact"]
        assert collectors["Copy"].collection_count == 4
        # 20 ticks at 1000 Hz
        assert collectors["Copy"].collection_time_nanos == 20_000_000

    def test_unknown_collector_names_pass_through(self):
        collectors = extract_collectors(parse_perf_counters(PERF_OUTPUT))

        assert "G1 Young Generation" in collectors
        assert "G1 Old Generation" in collectors
        assert "G1 stop-the-world phases" in collectors

    def test_collectors_without_frequency(self):
        assert extract_collectors({"sun.gc.collector.0.name": "Copy"}) is None

    def test_heap_sums_young_and_old(self):
        heap = extract_heap(parse_perf_counters(PERF_OUTPUT))

        assert heap == MemoryUsage(committed=3000, used=850, max=11000)

    def test_heap_with_new_generation_name(self):
        heap = extract_heap(parse_perf_counters(SERIAL_OUTPUT))

        assert heap == MemoryUsage(committed=40, used=10, max=60)

    def test_non_heap_and_classes(self):
        counters = parse_perf_counters(PERF_OUTPUT)

        assert extract_non_heap(counters) == MemoryUsage(committed=300, used=250, max=9000)
        assert extract_loaded_classes(counters) == 4900


def connected_source(process=None):
    """Connect a JcmdCounterSource with mocked jcmd and psutil."""
    process = process or Mock()
    process.is_running.return_value = True
    process.status.return_value = psutil.STATUS_SLEEPING
    process.cpu_times.return_value = Mock(user=2.0, system=1.0)
    source = JcmdCounterSource(4242, clock=lambda: 999)
    with patch("jvmmonitor.sources.jcmd_source.check_jcmd_installed", return_value=True), \
         patch("jvmmonitor.sources.jcmd_source.psutil.Process", return_value=process), \
         patch("jvmmonitor.sources.jcmd_source.run_command", return_value=(0, PERF_OUTPUT, "")):
        source.connect()
    return source, process


@pytest.mark.unit
class TestJcmdCounterSource:
    """Test cases for JcmdCounterSource."""

    def test_connect_requires_jcmd(self):
        with patch("jvmmonitor.sources.jcmd_source.check_jcmd_installed", return_value=False):
            with pytest.raises(AttachError, match="not found"):
                JcmdCounterSource(4242).connect()

    def test_connect_to_missing_process(self):
        with patch("jvmmonitor.sources.jcmd_source.check_jcmd_installed", return_value=True), \
             patch("jvmmonitor.sources.jcmd_source.psutil.Process",
                   side_effect=psutil.NoSuchProcess(4242)):
            with pytest.raises(AttachError):
                JcmdCounterSource(4242).connect()

    def test_connect_refused_by_jvm(self):
        with patch("jvmmonitor.sources.jcmd_source.check_jcmd_installed", return_value=True), \
             patch("jvmmonitor.sources.jcmd_source.psutil.Process"), \
             patch("jvmmonitor.sources.jcmd_source.run_command",
                   return_value=(1, "", "com.sun.tools.attach.AttachNotSupportedException: refused")):
            with pytest.raises(AttachError, match="refused"):
                JcmdCounterSource(4242).connect()

    def test_connect_runs_perf_counter_command(self):
        with patch("jvmmonitor.sources.jcmd_source.check_jcmd_installed", return_value=True), \
             patch("jvmmonitor.sources.jcmd_source.psutil.Process"), \
             patch("jvmmonitor.sources.jcmd_source.run_command",
                   return_value=(0, PERF_OUTPUT, "")) as mock_run:
            JcmdCounterSource(4242, jcmd_path="/opt/jdk/bin/jcmd", timeout=3.0).connect()

        mock_run.assert_called_once_with(["/opt/jdk/bin/jcmd", "4242", "PerfCounter.print"], timeout=3.0)

    def test_read(self):
        source, _ = connected_source()
        with patch("jvmmonitor.sources.jcmd_source.run_command", return_value=(0, PERF_OUTPUT, "")):
            counters = source.read()

        assert counters.timestamp_nanos == 999
        assert counters.total_cpu_time_nanos == 3_000_000_000
        assert counters.collectors["G1 Young Generation"].collection_count == 25
        assert counters.collectors["G1 Young Generation"].collection_time_nanos == 150_000_000
        assert counters.thread_count == 31
        assert counters.daemon_thread_count == 12
        assert counters.loaded_class_count == 4900

    def test_read_after_process_exit(self):
        source, process = connected_source()
        process.is_running.return_value = False

        with patch("jvmmonitor.sources.jcmd_source.run_command", return_value=(1, "", "")):
            with pytest.raises(ReadError):
                source.read()

    def test_jcmd_failure_on_live_process_degrades(self, caplog):
        source, _ = connected_source()

        with patch("jvmmonitor.sources.jcmd_source.run_command", return_value=(-1, "", "timeout")):
            counters = source.read()

        assert counters.collectors is None
        assert counters.total_cpu_time_nanos == 3_000_000_000
        assert counters.thread_count == 0
        assert "jcmd failed" in caplog.text

    def test_read_before_connect(self):
        with pytest.raises(ReadError):
            JcmdCounterSource(4242).read()

    def test_disconnect(self):
        source, _ = connected_source()

        source.disconnect()
        source.disconnect()

        with pytest.raises(ReadError):
            source.read()
