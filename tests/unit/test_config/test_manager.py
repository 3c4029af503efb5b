"""
Unit tests for configuration loading and the configuration singleton.
"""

import tomllib
from pathlib import Path

import pytest

from jvmmonitor.config import (
    CONFIG_ENV_VAR,
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    load_config,
    resolve_config_path,
    set_config_path,
)
from jvmmonitor.config import manager
from jvmmonitor.validation import ValidationError


@pytest.mark.unit
class TestLoadConfig:
    """Test cases for load_config and get_config."""

    def test_load_config_from_file(self, config_file):
        config = load_config(config_file)

        assert config.monitor.pid == 4242
        assert config.gelf.target == "udp://127.0.0.1:12201"
        assert is_config_loaded()
        assert get_config() is config

    def test_overrides_win_over_file(self, config_file):
        config = load_config(config_file, overrides={"monitor.pid": 1, "monitor.source": "psutil"})

        assert config.monitor.pid == 1
        assert config.monitor.source == "psutil"

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "missing.toml")

    def test_malformed_file(self, temp_dir):
        path = temp_dir / "broken.toml"
        path.write_text("[monitor\npid = ")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(path)

    def test_invalid_values(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text('[monitor]\npid = 1\ninterval_seconds = 0\n[gelf]\ntarget = "stdout://"\n')

        with pytest.raises(ValidationError):
            load_config(path)

    def test_get_config_uses_configured_path(self, config_file, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        original = manager._CONFIG_FILE_PATH
        try:
            set_config_path(config_file)

            assert get_config().labels.deployment_unit == "blue"
            assert get_config_info()["pid"] == 4242
        finally:
            set_config_path(original)

    def test_get_config_without_file(self, temp_dir, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.setattr(manager, "_CONFIG_FILE_PATH", temp_dir / "absent.toml")

        with pytest.raises(FileNotFoundError):
            get_config()

    def test_clear_cache(self, config_file):
        load_config(config_file)

        clear_config_cache()

        assert not is_config_loaded()
        assert get_config_info()["target"] is None


@pytest.mark.unit
class TestResolveConfigPath:
    """Test cases for resolve_config_path."""

    def test_explicit_path_wins(self, monkeypatch, temp_dir):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_dir / "env.toml"))

        assert resolve_config_path(Path("/etc/jvmmonitor.toml")) == Path("/etc/jvmmonitor.toml")

    def test_environment_variable(self, monkeypatch, temp_dir):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_dir / "env.toml"))

        assert resolve_config_path() == temp_dir / "env.toml"

    def test_default_path_when_present(self, monkeypatch, config_file):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.setattr(manager, "_CONFIG_FILE_PATH", config_file)

        assert resolve_config_path() == config_file

    def test_no_path(self, monkeypatch, temp_dir):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.setattr(manager, "_CONFIG_FILE_PATH", temp_dir / "absent.toml")

        assert resolve_config_path() is None
