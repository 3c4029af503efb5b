"""
Storage configuration model and validation.

This module defines the StorageConfig dataclass used by the Parquet snapshot
sink: the compression algorithm of the written files, how many snapshots
are buffered before they are appended, and the size at which the sink moves
on to a new part file.
"""

from typing import Literal, Dict, Any
from dataclasses import dataclass

SUPPORTED_COMPRESSIONS = ("snappy", "gzip", "brotli", "lz4", "zstd")

DEFAULT_ROLLOVER_BYTES = 64 * 1024 * 1024


@dataclass
class StorageConfig:
    """
    Configuration model for the snapshot storage sink.

    Attributes:
        compression: Compression algorithm for the Parquet file
            - 'snappy': Fast compression/decompression (default)
            - 'gzip': Higher compression ratio, slower
            - 'brotli': Very high compression ratio
            - 'lz4': Very fast compression
            - 'zstd': Modern balanced compression
        flush_every: Number of buffered snapshots that triggers a write.
            The buffer is always flushed when the sink is closed.
        rollover_bytes: Once the current file reaches this size, further
            snapshots go to a new part file. Every append rewrites the
            current file, so this bounds the cost of one flush. 0 disables
            rollover.
    """

    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"
    flush_every: int = 60
    rollover_bytes: int = DEFAULT_ROLLOVER_BYTES

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Create a StorageConfig instance from a dictionary.

        Args:
            config_dict: Dictionary containing storage configuration

        Returns:
            StorageConfig instance

        Raises:
            ValueError: If invalid configuration values are provided
        """
        compression = config_dict.get("compression", "snappy")
        flush_every = config_dict.get("flush_every", 60)
        rollover_bytes = config_dict.get("rollover_bytes", DEFAULT_ROLLOVER_BYTES)

        if compression not in SUPPORTED_COMPRESSIONS:
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        if isinstance(flush_every, bool) or not isinstance(flush_every, int) or flush_every < 1:
            raise ValueError(f"flush_every must be a positive integer, got {flush_every}")

        if isinstance(rollover_bytes, bool) or not isinstance(rollover_bytes, int) or rollover_bytes < 0:
            raise ValueError(f"rollover_bytes must be a non-negative integer, got {rollover_bytes}")

        return cls(compression=compression, flush_every=flush_every, rollover_bytes=rollover_bytes)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the StorageConfig to a dictionary.

        Returns:
            Dictionary representation of the StorageConfig
        """
        return {
            "compression": self.compression,
            "flush_every": self.flush_every,
            "rollover_bytes": self.rollover_bytes,
        }
