"""
Storage module for recorded snapshots.

Snapshots written by the ``parquet://`` sink are stored as Parquet files
through Polars, with a JSON metadata sidecar describing the session. The
plotter reads them back through the same interface.
"""

from .base import DataStorage
from .parquet_storage import ParquetStorage
from .factory import create_storage

__all__ = ["DataStorage", "ParquetStorage", "create_storage"]
