"""
Unit tests for the jvmmonitor command-line interface.
"""

import io
import signal
from unittest.mock import Mock, patch

import pytest

from conftest import FakeCounterSource, RecordingTransport, make_counters
from jvmmonitor.cli.main import (
    build_parser,
    config_overrides,
    main,
    print_java_processes,
    run_monitor,
)
from jvmmonitor.config import load_config
from jvmmonitor.sampling import AttachError
from jvmmonitor.system import JavaProcess
from jvmmonitor.transports import TransportError


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep the CLI from replacing pytest's log handlers."""
    with patch("jvmmonitor.cli.main.setup_logging"):
        yield


@pytest.fixture
def java_process():
    with patch(
        "jvmmonitor.cli.main.find_java_process",
        return_value=JavaProcess(pid=4242, display_name="com.example.Main", attachable=True),
    ) as mock_find:
        yield mock_find


@pytest.mark.unit
class TestArguments:
    """Test cases for argument parsing and overrides."""

    def test_overrides_map_to_dotted_keys(self):
        args = build_parser().parse_args(
            ["--pid", "7", "--interval", "2.5", "--target", "stdout://", "--app-name", "billing"]
        )

        overrides = config_overrides(args)

        assert overrides["monitor.pid"] == 7
        assert overrides["monitor.interval_seconds"] == 2.5
        assert overrides["gelf.target"] == "stdout://"
        assert overrides["application.name"] == "billing"
        assert overrides["application.deployment_unit"] is None

    def test_unknown_source_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--source", "jmx"])


@pytest.mark.unit
class TestListing:
    """Test cases for --list."""

    @patch("jvmmonitor.cli.main.list_java_processes")
    def test_print_java_processes(self, mock_list):
        mock_list.return_value = [
            JavaProcess(pid=10, display_name="app.jar", attachable=True),
            JavaProcess(pid=11, display_name="Other", attachable=False),
        ]
        stream = io.StringIO()

        assert print_java_processes(stream) == 2
        assert stream.getvalue() == "10\tapp.jar\n11\tOther (not attachable)\n"

    @patch("jvmmonitor.cli.main.list_java_processes", return_value=[])
    def test_list_exits_zero(self, _):
        assert main(["--list"]) == 0


@pytest.mark.unit
class TestRunMonitor:
    """Test cases for run_monitor."""

    def test_sends_initial_snapshot_and_stops_on_lost_connection(self, config_file):
        app_config = load_config(config_file)
        source = FakeCounterSource([make_counters(timestamp=0)])
        transport = RecordingTransport()
        previous = signal.getsignal(signal.SIGINT)

        with patch("jvmmonitor.cli.main.create_counter_source", return_value=source):
            assert run_monitor(app_config, transport) == 0

        assert len(transport.sent) == 1
        assert source.disconnect_calls == 1
        assert signal.getsignal(signal.SIGINT) is previous

    def test_attach_failure_returns_one(self, config_file):
        app_config = load_config(config_file)
        source = FakeCounterSource([], connect_error=AttachError("refused"))

        with patch("jvmmonitor.cli.main.create_counter_source", return_value=source):
            assert run_monitor(app_config, RecordingTransport()) == 1


@pytest.mark.unit
class TestMain:
    """Test cases for main()."""

    def test_runs_and_closes_transport(self, config_file, java_process):
        transport = Mock()
        with patch("jvmmonitor.cli.main.create_transport", return_value=transport), \
                patch("jvmmonitor.cli.main.run_monitor", return_value=0) as mock_run:
            assert main(["--config", str(config_file)]) == 0

        app_config = mock_run.call_args[0][0]
        assert app_config.monitor.pid == 4242
        transport.close.assert_called_once()

    def test_cli_overrides_file(self, config_file, java_process):
        with patch("jvmmonitor.cli.main.create_transport", return_value=Mock()), \
                patch("jvmmonitor.cli.main.run_monitor", return_value=0) as mock_run:
            main(["--config", str(config_file), "--interval", "3", "--app-name", "ledger"])

        app_config = mock_run.call_args[0][0]
        assert app_config.monitor.interval_seconds == 3.0
        assert app_config.labels.application == "ledger"

    def test_missing_config_file_exits(self, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(temp_dir / "missing.toml")])

        assert exc_info.value.code == 1

    def test_unknown_pid_exits(self, config_file):
        with patch("jvmmonitor.cli.main.find_java_process", return_value=None):
            with pytest.raises(SystemExit) as exc_info:
                main(["--config", str(config_file)])

        assert exc_info.value.code == 1

    def test_bad_target_exits(self, config_file, java_process):
        with patch("jvmmonitor.cli.main.create_transport", side_effect=TransportError("bad target")):
            with pytest.raises(SystemExit) as exc_info:
                main(["--config", str(config_file)])

        assert exc_info.value.code == 1
