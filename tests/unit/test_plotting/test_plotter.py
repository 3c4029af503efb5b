"""
Unit tests for the snapshot plotter.
"""

from unittest.mock import patch

import polars as pl
import pytest

from conftest import make_counters
from jvmmonitor.config import StorageConfig
from jvmmonitor.plotter import (
    choose_resample_interval,
    generate_plots_for_dir,
    plot_snapshots,
)
from jvmmonitor.sampling import build_snapshot
from jvmmonitor.transports import ParquetTransport


@pytest.fixture(autouse=True)
def no_png_export():
    """PNG export needs Kaleido; make it fail the way a missing install does."""
    with patch("plotly.graph_objects.Figure.write_image", side_effect=ValueError("kaleido missing")):
        yield


def record_session(path, count=5):
    transport = ParquetTransport(str(path), storage_config=StorageConfig(flush_every=100))
    previous = None
    for i in range(count):
        previous = build_snapshot(
            make_counters(
                timestamp=i * 1_000_000_000,
                cpu=i * 250_000_000,
                collectors={"PS Scavenge": (i, i * 1_000_000), "PS MarkSweep": (0, 0)},
                heap_used=(i + 1) * 1024 * 1024,
            ),
            previous,
        )
        transport.send(previous)
    transport.close()


@pytest.mark.unit
class TestResampleInterval:
    """Test cases for choose_resample_interval."""

    @pytest.mark.parametrize(
        "duration,expected",
        [(0, "1s"), (60, "1s"), (61, "5s"), (899, "5s"), (900, "30s"), (3600, "1m")],
    )
    def test_interval(self, duration, expected):
        assert choose_resample_interval(duration) == expected


@pytest.mark.unit
class TestPlotSnapshots:
    """Test cases for plot_snapshots and generate_plots_for_dir."""

    def test_writes_load_and_memory_plots(self, temp_dir):
        data_file = temp_dir / "session.parquet"
        record_session(data_file)

        written = plot_snapshots(data_file, temp_dir / "plots")

        assert sorted(p.name for p in written) == [
            "session_load_plot.html",
            "session_memory_plot.html",
        ]
        assert all(p.exists() for p in written)

    def test_missing_file(self, temp_dir):
        assert plot_snapshots(temp_dir / "missing.parquet") == []

    def test_file_without_timestamp(self, temp_dir):
        data_file = temp_dir / "other.parquet"
        pl.DataFrame({"value": [1, 2]}).write_parquet(data_file)

        assert plot_snapshots(data_file) == []

    def test_plots_every_file_in_dir(self, temp_dir):
        record_session(temp_dir / "a.parquet")
        record_session(temp_dir / "b.parquet")

        written = generate_plots_for_dir(temp_dir)

        assert len(written) == 4
