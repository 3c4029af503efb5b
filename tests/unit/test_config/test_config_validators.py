"""
Unit tests for configuration validation.

Tests the conversion of the raw TOML tables into the typed configuration
dataclasses, including command-line override merging.
"""

import pytest

from jvmmonitor.config.validators import (
    merge_overrides,
    validate_app_config,
    validate_gelf_config,
    validate_label_config,
    validate_monitor_config,
    validate_storage_config,
)
from jvmmonitor.validation import ValidationError


@pytest.mark.unit
class TestMonitorConfigValidation:
    """Test cases for the [monitor] table."""

    def test_valid_monitor_config(self, sample_config_data):
        config = validate_monitor_config(sample_config_data["monitor"])

        assert config.pid == 4242
        assert config.interval_seconds == 1.0
        assert config.source == "jcmd"
        assert config.command_timeout == 5.0

    def test_missing_pid(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config({"interval_seconds": 1.0})

        assert exc_info.value.field_name == "monitor.pid"
        assert "--pid" in str(exc_info.value)

    def test_missing_interval(self):
        with pytest.raises(ValidationError, match="interval"):
            validate_monitor_config({"pid": 1})

    @pytest.mark.parametrize("interval", [0, 0.05, 3601, "fast"])
    def test_invalid_interval(self, interval):
        with pytest.raises(ValidationError):
            validate_monitor_config({"pid": 1, "interval_seconds": interval})

    @pytest.mark.parametrize("pid", [0, -5, True, "abc"])
    def test_invalid_pid(self, pid):
        with pytest.raises(ValidationError):
            validate_monitor_config({"pid": pid, "interval_seconds": 1.0})

    def test_source_is_case_insensitive(self):
        config = validate_monitor_config({"pid": 1, "interval_seconds": 1, "source": "PSUTIL"})

        assert config.source == "psutil"

    def test_unknown_source(self):
        with pytest.raises(ValidationError, match="monitor.source"):
            validate_monitor_config({"pid": 1, "interval_seconds": 1, "source": "jmx"})


@pytest.mark.unit
class TestGelfConfigValidation:
    """Test cases for the [gelf] table."""

    def test_valid_gelf_config(self, sample_config_data):
        config = validate_gelf_config(sample_config_data["gelf"])

        assert config.target == "udp://127.0.0.1:12201"
        assert config.queue_size == 16
        assert config.send_buffer_size == 65536
        assert config.tcp_no_delay is True

    def test_defaults(self):
        config = validate_gelf_config({"target": "stdout://"})

        assert config.queue_size == 512
        assert config.reconnect_delay == 1.0
        assert config.compress is True

    def test_missing_target(self):
        with pytest.raises(ValidationError, match="gelf.target"):
            validate_gelf_config({})

    def test_invalid_queue_size(self):
        with pytest.raises(ValidationError):
            validate_gelf_config({"target": "stdout://", "queue_size": 0})

    def test_invalid_boolean(self):
        with pytest.raises(ValidationError):
            validate_gelf_config({"target": "stdout://", "compress": "maybe"})


@pytest.mark.unit
class TestOtherSections:
    """Test cases for the [application] and [storage] tables."""

    def test_labels(self):
        labels = validate_label_config({"name": "billing", "deployment_unit": "blue"})

        assert labels.as_fields() == {"application": "billing", "deployment_unit": "blue"}

    def test_labels_are_optional(self):
        assert validate_label_config({}).as_fields() == {}

    def test_empty_label_rejected(self):
        with pytest.raises(ValidationError):
            validate_label_config({"name": "  "})

    def test_storage(self, sample_config_data):
        storage = validate_storage_config(sample_config_data["storage"])

        assert storage.compression == "zstd"
        assert storage.flush_every == 10

    def test_invalid_storage(self):
        with pytest.raises(ValidationError):
            validate_storage_config({"compression": "rar"})


@pytest.mark.unit
class TestOverrides:
    """Test cases for merge_overrides and validate_app_config."""

    def test_overrides_replace_file_values(self, sample_config_data):
        merged = merge_overrides(
            sample_config_data, {"monitor.pid": 99, "gelf.target": "stdout://"}
        )

        assert merged["monitor"]["pid"] == 99
        assert merged["gelf"]["target"] == "stdout://"
        assert sample_config_data["monitor"]["pid"] == 4242

    def test_none_overrides_are_ignored(self, sample_config_data):
        merged = merge_overrides(sample_config_data, {"monitor.pid": None})

        assert merged["monitor"]["pid"] == 4242

    def test_overrides_create_missing_sections(self):
        merged = merge_overrides({}, {"application.name": "billing"})

        assert merged == {"application": {"name": "billing"}}

    def test_override_key_needs_section(self):
        with pytest.raises(ValidationError):
            merge_overrides({}, {"pid": 1})

    def test_full_config(self, sample_config_data):
        config = validate_app_config(sample_config_data)

        assert config.monitor.pid == 4242
        assert config.gelf.compress is True
        assert config.labels.application == "billing"
        assert config.storage.flush_every == 10

    def test_config_from_overrides_only(self):
        config = validate_app_config(
            merge_overrides({}, {
                "monitor.pid": 7,
                "monitor.interval_seconds": 2.0,
                "gelf.target": "tcp://graylog:12201",
            })
        )

        assert config.monitor.pid == 7
        assert config.labels.as_fields() == {}
        assert config.storage.compression == "snappy"
