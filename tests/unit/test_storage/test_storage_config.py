"""
Unit tests for storage configuration.
"""

import pytest

from jvmmonitor.config.storage_config import StorageConfig


@pytest.mark.unit
class TestStorageConfig:
    """Test cases for StorageConfig class."""

    def test_default_values(self):
        config = StorageConfig()
        assert config.compression == "snappy"
        assert config.flush_every == 60

    def test_from_dict(self):
        config = StorageConfig.from_dict({"compression": "gzip", "flush_every": 5})

        assert config.compression == "gzip"
        assert config.flush_every == 5

    def test_from_dict_defaults(self):
        assert StorageConfig.from_dict({}) == StorageConfig()

    def test_invalid_compression(self):
        with pytest.raises(ValueError, match="Unsupported compression"):
            StorageConfig.from_dict({"compression": "invalid"})

    @pytest.mark.parametrize("flush_every", [0, -3, "10", True, 1.5])
    def test_invalid_flush_every(self, flush_every):
        with pytest.raises(ValueError, match="flush_every"):
            StorageConfig.from_dict({"flush_every": flush_every})

    def test_to_dict_round_trip(self):
        config = StorageConfig(compression="lz4", flush_every=3)

        assert StorageConfig.from_dict(config.to_dict()) == config

    def test_rollover_bytes(self):
        assert StorageConfig().rollover_bytes == 64 * 1024 * 1024
        assert StorageConfig.from_dict({"rollover_bytes": 0}).rollover_bytes == 0

    @pytest.mark.parametrize("rollover_bytes", [-1, "1MB", False])
    def test_invalid_rollover_bytes(self, rollover_bytes):
        with pytest.raises(ValueError, match="rollover_bytes"):
            StorageConfig.from_dict({"rollover_bytes": rollover_bytes})
