"""
Factory for creating storage instances.
"""

import logging

from ..config.storage_config import StorageConfig
from .base import DataStorage
from .parquet_storage import ParquetStorage

logger = logging.getLogger(__name__)


def create_storage(storage_config: StorageConfig) -> DataStorage:
    """
    Create the storage backend for the snapshot sink.

    Args:
        storage_config: Validated storage settings

    Returns:
        DataStorage instance
    """
    logger.debug(f"Creating ParquetStorage with compression: {storage_config.compression}")
    return ParquetStorage(compression=storage_config.compression)
