"""
Parquet storage implementation using Polars.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Any, Literal
import polars as pl

from .base import DataStorage

logger = logging.getLogger(__name__)


class ParquetStorage(DataStorage):
    """
    Parquet storage for snapshot records.

    Parquet files cannot be appended in place, so ``append_dataframe``
    rewrites the file with the old and new rows. Columns present on only one
    side are filled with nulls. Callers bound the rewrite cost by moving on
    to a new file past a size limit (see ``StorageConfig.rollover_bytes``).
    """

    def __init__(self, compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"):
        self.compression = compression
        logger.debug(f"Initialized ParquetStorage with compression: {compression}")

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            df.write_parquet(path, compression=self.compression)
            logger.debug(f"Saved DataFrame with {len(df)} rows to {path}")
        except Exception as e:
            logger.error(f"Failed to save DataFrame to {path}: {e}")
            raise

    def load_dataframe(self, path: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        try:
            if columns:
                # Column pruning: only the requested columns are read
                df = pl.read_parquet(path, columns=columns)
                logger.debug(f"Loaded DataFrame with columns {columns} from {path}")
            else:
                df = pl.read_parquet(path)
                logger.debug(f"Loaded DataFrame with {len(df)} rows from {path}")
            return df
        except Exception as e:
            logger.error(f"Failed to load DataFrame from {path}: {e}")
            raise

    def append_dataframe(self, df: pl.DataFrame, path: str) -> None:
        try:
            if self.file_exists(path):
                existing_df = self.load_dataframe(path)
                combined_df = pl.concat([existing_df, df], how="diagonal_relaxed")
                self.save_dataframe(combined_df, path)
                logger.debug(f"Appended {len(df)} rows to existing file {path}")
            else:
                self.save_dataframe(df, path)
                logger.debug(f"Created new file {path} with {len(df)} rows")
        except Exception as e:
            logger.error(f"Failed to append DataFrame to {path}: {e}")
            raise

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        """
        Save dictionary data as JSON.

        Used for the small metadata sidecar next to a snapshot file, where
        JSON is more readable than Parquet.
        """
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            logger.debug(f"Saved dictionary data to {path}")
        except Exception as e:
            logger.error(f"Failed to save dictionary to {path}: {e}")
            raise

    def file_exists(self, path: str) -> bool:
        return Path(path).exists()

    def get_file_size(self, path: str) -> int:
        try:
            return Path(path).stat().st_size
        except FileNotFoundError:
            return 0
