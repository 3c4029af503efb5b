"""
Abstract base class for snapshot storage implementations.

This module defines the DataStorage interface used by the Parquet snapshot
sink and the plotter. It covers:
- Saving, appending and loading DataFrames with optional column pruning
- Saving small dictionaries (session metadata sidecars)
- Checking file existence and retrieving file sizes
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional
import polars as pl


class DataStorage(ABC):
    """Abstract base class for data storage implementations."""

    @abstractmethod
    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """
        Save a Polars DataFrame to the specified path, replacing any existing file.

        Args:
            df: Polars DataFrame to save
            path: File path to save to
        """
        pass

    @abstractmethod
    def load_dataframe(
        self, path: str, columns: Optional[List[str]] = None
    ) -> pl.DataFrame:
        """
        Load a Polars DataFrame from the specified path.

        Args:
            path: File path to load from
            columns: Optional list of columns to load (for column pruning)
        """
        pass

    @abstractmethod
    def append_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """
        Append rows to an existing file, creating it if necessary.

        Implementations may rewrite the whole file, so the cost grows with
        the file size.

        Args:
            df: Polars DataFrame to append
            path: File path to append to
        """
        pass

    @abstractmethod
    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        pass

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def get_file_size(self, path: str) -> int:
        """Return the size of a file in bytes, or 0 if it does not exist."""
        pass
