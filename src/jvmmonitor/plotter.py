"""
Generates plots from recorded snapshot files.

This module reads the Parquet files written by the ``parquet://`` sink with
Polars and renders interactive time-series plots with Plotly:

1. A load plot with CPU load and GC load (plus young/old GC load when the
   session had detailed GC accounting).
2. A memory plot with heap and non-heap usage next to the committed sizes.

Samples are resampled to an interval chosen from the session duration so
long sessions stay readable. Plots are saved as HTML and, if Kaleido is
installed, as PNG images.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import plotly.express as px
import plotly.graph_objects as go
import polars as pl

from .storage import ParquetStorage

logger = logging.getLogger(__name__)

LOAD_COLUMNS = ["cpu_load", "gc_load", "gc_young_load", "gc_old_load"]
MEMORY_COLUMNS = ["heap_used", "heap_committed", "non_heap_used", "non_heap_committed"]
BYTES_PER_MB = 1024 * 1024


def choose_resample_interval(duration_seconds: float) -> str:
    """Return a Polars interval string suited to a session of the given length."""
    if duration_seconds <= 60:
        return "1s"
    elif duration_seconds < 900:
        return "5s"
    elif duration_seconds < 3600:
        return "30s"
    return "1m"


def _save_plotly_figure(fig: go.Figure, base_filename: str, output_dir: Path) -> Optional[Path]:
    """
    Saves a Plotly figure as HTML and, if possible, PNG.

    Returns:
        The HTML file, or None if it could not be written.
    """
    plot_filename_html = output_dir / f"{base_filename}.html"
    try:
        fig.write_html(plot_filename_html)
        logger.info(f"Interactive plot saved to: {plot_filename_html}")
    except OSError as e:
        logger.error(f"Failed to save plot {plot_filename_html}: {e}", exc_info=True)
        return None

    try:
        plot_filename_png = output_dir / f"{base_filename}.png"
        fig.write_image(plot_filename_png, width=1200, height=600)
        logger.info(f"Static plot saved to: {plot_filename_png}")
    except Exception as e_kaleido:
        # Non-critical: the HTML plot is already written.
        logger.warning(
            f"Failed to save static plot to PNG (Kaleido might be missing or misconfigured): {e_kaleido}. "
            f"To enable PNG export, install Kaleido: `pip install jvmmonitor[export]`"
        )
    return plot_filename_html


def _resample(df: pl.DataFrame, columns: List[str], every: str) -> pl.DataFrame:
    return (
        df.sort("Timestamp")
        .group_by_dynamic(index_column="Timestamp", every=every)
        .agg([pl.col(c).mean().alias(c) for c in columns])
    )


def _to_long(df: pl.DataFrame, columns: List[str], value_name: str) -> pl.DataFrame:
    return df.unpivot(
        index="Timestamp", on=columns, variable_name="Metric", value_name=value_name
    ).drop_nulls(value_name)


def _generate_load_plot(df: pl.DataFrame, every: str, title: str, output_dir: Path) -> Optional[Path]:
    columns = [c for c in LOAD_COLUMNS if c in df.columns and df[c].null_count() < len(df)]
    long_df = _to_long(_resample(df, columns, every), columns, "Load")
    if long_df.is_empty():
        logger.warning(f"Load Plot: no load data for {title}. Skipping.")
        return None

    fig = px.line(
        long_df.to_pandas(),
        x="Timestamp",
        y="Load",
        color="Metric",
        title=f"CPU and GC Load - {title}<br>Resample: {every}",
        markers=True,
    )
    fig.update_layout(
        legend_title_text="Metric",
        xaxis_title=f"Time (Resampled to {every} intervals)",
        yaxis_title="Load (fraction of elapsed time)",
    )
    return _save_plotly_figure(fig, f"{title}_load_plot", output_dir)


def _generate_memory_plot(df: pl.DataFrame, every: str, title: str, output_dir: Path) -> Optional[Path]:
    columns = [c for c in MEMORY_COLUMNS if c in df.columns]
    df_mb = df.with_columns([(pl.col(c) / BYTES_PER_MB).alias(c) for c in columns])
    long_df = _to_long(_resample(df_mb, columns, every), columns, "MB")
    if long_df.is_empty():
        logger.warning(f"Memory Plot: no memory data for {title}. Skipping.")
        return None

    fig = px.line(
        long_df.to_pandas(),
        x="Timestamp",
        y="MB",
        color="Metric",
        title=f"Heap and Non-Heap Memory - {title}<br>Resample: {every}",
    )
    fig.update_layout(
        legend_title_text="Metric",
        xaxis_title=f"Time (Resampled to {every} intervals)",
        yaxis_title="Memory (MB)",
    )
    return _save_plotly_figure(fig, f"{title}_memory_plot", output_dir)


def plot_snapshots(parquet_path: Path, output_dir: Optional[Path] = None) -> List[Path]:
    """
    Render the load and memory plots for one snapshot file.

    Args:
        parquet_path: File written by the ``parquet://`` sink.
        output_dir: Destination of the plots; defaults to the file's directory.

    Returns:
        The HTML files that were written.
    """
    parquet_path = Path(parquet_path)
    output_dir = Path(output_dir) if output_dir is not None else parquet_path.parent
    storage = ParquetStorage()

    if not storage.file_exists(str(parquet_path)):
        logger.error(f"Data file not found: {parquet_path}")
        return []

    df = storage.load_dataframe(str(parquet_path))
    if df.is_empty():
        logger.warning(f"No data found in {parquet_path}. Skipping plot.")
        return []
    if "timestamp" not in df.columns:
        logger.error(f"Data in {parquet_path} has no 'timestamp' column.")
        return []

    df = df.with_columns(
        pl.from_epoch((pl.col("timestamp") * 1000).cast(pl.Int64), time_unit="ms").alias("Timestamp")
    )
    duration = df["timestamp"].max() - df["timestamp"].min()
    every = choose_resample_interval(duration)
    logger.info(f"Data duration: {duration:.0f}s. Resample interval: {every}")

    output_dir.mkdir(parents=True, exist_ok=True)
    written = [
        _generate_load_plot(df, every, parquet_path.stem, output_dir),
        _generate_memory_plot(df, every, parquet_path.stem, output_dir),
    ]
    return [path for path in written if path is not None]


def generate_plots_for_dir(data_dir: Path) -> List[Path]:
    """Plot every ``.parquet`` snapshot file in a directory."""
    logger.info(f"Searching for Parquet data files in: {data_dir} to generate plots.")
    written: List[Path] = []
    for data_file in sorted(Path(data_dir).glob("*.parquet")):
        logger.info(f"--- Generating plot for {data_file.name} ---")
        written.extend(plot_snapshots(data_file, data_dir))
    if not written:
        logger.info(f"No plots generated for {data_dir}.")
    return written


def main_cli() -> None:
    """Console script entry point for ``jvmmonitor-plot``."""
    parser = argparse.ArgumentParser(description="Plot snapshots recorded by the parquet sink.")
    parser.add_argument("path", type=Path, help="A .parquet snapshot file or a directory of them.")
    parser.add_argument("-o", "--output-dir", type=Path, help="Directory for the generated plots.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    if args.path.is_dir():
        written = generate_plots_for_dir(args.path)
    else:
        written = plot_snapshots(args.path, args.output_dir)
    sys.exit(0 if written else 1)


if __name__ == "__main__":
    main_cli()
