"""
Parquet file sink for snapshots.

Records are buffered in memory and appended to the Parquet file through the
storage layer every ``flush_every`` snapshots and when the sink is closed. A
JSON sidecar (``<file>.meta.json``) records the session labels and start
time for the plotter. Past ``rollover_bytes`` the sink continues in
numbered part files next to the first one.
"""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl

from ..config.storage_config import StorageConfig
from ..models import Snapshot
from ..storage import DataStorage, create_storage
from .base import AbstractTransport, TransportError

logger = logging.getLogger(__name__)

LABEL_COLUMNS = ("application", "deployment_unit")

# Failed flushes whose rows are kept before the oldest rows are dropped.
MAX_PENDING_FLUSHES = 10

SNAPSHOT_SCHEMA: Dict[str, Any] = {
    "timestamp": pl.Float64,
    "sampled_at_nanos": pl.Int64,
    "host_identity": pl.Utf8,
    "application": pl.Utf8,
    "deployment_unit": pl.Utf8,
    "cpu_load": pl.Float64,
    "total_cpu_time_nanos": pl.Int64,
    "heap_committed": pl.Int64,
    "heap_used": pl.Int64,
    "heap_max": pl.Int64,
    "non_heap_committed": pl.Int64,
    "non_heap_used": pl.Int64,
    "non_heap_max": pl.Int64,
    "loaded_classes": pl.Int64,
    "thread_count": pl.Int64,
    "daemon_thread_count": pl.Int64,
    "gc_accounting": pl.Utf8,
    "gc_total_count": pl.Int64,
    "gc_total_time_nanos": pl.Int64,
    "gc_delta_count": pl.Int64,
    "gc_load": pl.Float64,
    "gc_young_count": pl.Int64,
    "gc_old_count": pl.Int64,
    "gc_young_delta_count": pl.Int64,
    "gc_old_delta_count": pl.Int64,
    "gc_young_time_nanos": pl.Int64,
    "gc_old_time_nanos": pl.Int64,
    "gc_young_load": pl.Float64,
    "gc_old_load": pl.Float64,
    "gc_young_collectors": pl.Utf8,
    "gc_old_collectors": pl.Utf8,
}


def metadata_path(path: str) -> str:
    return f"{path}.meta.json"


def part_path(path: str, part: int) -> str:
    """Return the file name of a numbered part, ``session.part0001.parquet`` for part 1."""
    if part == 0:
        return path
    base = Path(path)
    return str(base.with_name(f"{base.stem}.part{part:04d}{base.suffix}"))


class ParquetTransport(AbstractTransport):
    """
    Appends snapshot records to a Parquet file.

    ``try_send`` only buffers and always accepts while the sink is open; a
    write failure during a flush is logged and the buffered rows are kept
    for the next attempt, up to ``MAX_PENDING_FLUSHES`` flushes' worth.
    Beyond that the oldest rows are dropped.

    Writing moves on to a new part file when the current one reaches
    ``rollover_bytes`` or cannot be read back.
    """

    def __init__(
        self,
        path: str,
        labels: Optional[Dict[str, str]] = None,
        storage_config: Optional[StorageConfig] = None,
        storage: Optional[DataStorage] = None,
    ):
        super().__init__(labels)
        if not path:
            raise TransportError("Parquet sink requires a file path (parquet://<path>)")
        self.base_path = path
        self.part = 0
        self.path = path
        self.storage_config = storage_config or StorageConfig()
        self.storage = storage or create_storage(self.storage_config)
        self._buffer: List[Dict[str, Any]] = []
        self.rows_written = 0
        self.rows_dropped = 0
        self._write_metadata()

    def _write_metadata(self) -> None:
        metadata = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "labels": self.labels,
            "compression": self.storage_config.compression,
        }
        try:
            self.storage.save_dict(metadata, metadata_path(self.base_path))
        except OSError as e:
            raise TransportError(f"Cannot write to {self.base_path}: {e}") from e

    def _record(self, snapshot: Snapshot) -> Dict[str, Any]:
        record: Dict[str, Any] = {"timestamp": time.time()}
        for column in LABEL_COLUMNS:
            record[column] = self.labels.get(column)
        record.update(snapshot.to_record())
        return record

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    @property
    def max_buffered(self) -> int:
        return self.storage_config.flush_every * MAX_PENDING_FLUSHES

    def _next_part(self) -> None:
        self.part += 1
        self.path = part_path(self.base_path, self.part)
        logger.info(f"Continuing snapshot file in {self.path}")

    def flush(self) -> None:
        """
        Write the buffered records to the current Parquet file.

        Raises:
            TransportError: If the rows could not be written. They stay
                buffered.
        """
        if not self._buffer:
            return
        rollover_bytes = self.storage_config.rollover_bytes
        if rollover_bytes and self.storage.get_file_size(self.path) >= rollover_bytes:
            self._next_part()

        df = pl.DataFrame(self._buffer, schema=SNAPSHOT_SCHEMA)
        try:
            self.storage.append_dataframe(df, self.path)
        except pl.exceptions.PolarsError as e:
            failed_path = self.path
            self._next_part()
            raise TransportError(f"Existing file {failed_path} is not usable: {e}") from e
        except OSError as e:
            raise TransportError(f"Failed to write snapshots to {self.path}: {e}") from e
        self.rows_written += len(self._buffer)
        logger.debug(f"Flushed {len(self._buffer)} snapshots to {self.path}")
        self._buffer.clear()

    def send(self, snapshot: Snapshot) -> None:
        self._ensure_open()
        self._buffer.append(self._record(snapshot))
        excess = len(self._buffer) - self.max_buffered
        if excess > 0:
            del self._buffer[:excess]
            self.rows_dropped += excess
            logger.warning(f"Snapshot buffer for {self.path} is full; dropped {excess} oldest rows")
        if len(self._buffer) >= self.storage_config.flush_every:
            self.flush()

    def try_send(self, snapshot: Snapshot) -> bool:
        if self._closed:
            return False
        try:
            self.send(snapshot)
        except TransportError as e:
            logger.warning(f"{e}; keeping {self.buffered} snapshots buffered")
        return True

    def close(self) -> None:
        if self._closed:
            return
        try:
            self.flush()
        except TransportError as e:
            logger.error(f"{e}; discarding {self.buffered} buffered snapshots")
        finally:
            super().close()
        logger.info(f"Wrote {self.rows_written} snapshots to {self.base_path}")
