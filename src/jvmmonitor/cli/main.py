"""
Command-line interface for the jvmmonitor agent.

This module provides the CLI entry point: it resolves the configuration
from the TOML file and command-line overrides, checks the target process,
attaches a sampler and runs the sampling loop until the process exits or a
SIGINT/SIGTERM requests a stop.
"""

import argparse
import logging
import signal
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

import psutil

from ..config import load_config, resolve_config_path
from ..models import AppConfig
from ..sampling import AttachError, Sampler, SamplingLoop
from ..sources import SUPPORTED_SOURCES, create_counter_source
from ..system import find_java_process, list_java_processes
from ..transports import AbstractTransport, TransportError, create_transport
from ..validation import ValidationError, handle_cli_error

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Configure root logging with the agent's format. Replaces earlier handlers."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=stream or sys.stdout,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jvmmonitor",
        description="Sample JVM runtime counters and emit them as GELF events.",
    )
    parser.add_argument(
        "-c", "--config", type=Path,
        help="Path to config.toml (defaults to $JVMMONITOR_CONFIG, then conf/config.toml).",
    )
    parser.add_argument("-p", "--pid", type=int, help="Process id of the JVM to monitor.")
    parser.add_argument(
        "-i", "--interval", type=float,
        help="Seconds between two samples (overrides monitor.interval_seconds).",
    )
    parser.add_argument(
        "-t", "--target", type=str,
        help="Event target: udp://host:port, tcp://host:port, stdout:// or parquet://<path>.",
    )
    parser.add_argument(
        "--source", type=str, choices=SUPPORTED_SOURCES,
        help="Counter source (overrides monitor.source).",
    )
    parser.add_argument("--app-name", type=str, help="Value of the _application field.")
    parser.add_argument(
        "--deployment-unit", type=str, help="Value of the _deployment_unit field."
    )
    parser.add_argument(
        "-l", "--list", action="store_true", help="List local Java processes and exit."
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    return parser


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map command-line options onto dotted configuration keys."""
    return {
        "monitor.pid": args.pid,
        "monitor.interval_seconds": args.interval,
        "monitor.source": args.source,
        "gelf.target": args.target,
        "application.name": args.app_name,
        "application.deployment_unit": args.deployment_unit,
    }


def print_java_processes(stream: Optional[TextIO] = None) -> int:
    """Print the local Java processes, one per line. Returns the number found."""
    stream = stream or sys.stdout
    processes = list_java_processes()
    if not processes:
        stream.write("No Java processes found\n")
        return 0
    for process in processes:
        marker = "" if process.attachable else " (not attachable)"
        stream.write(f"{process.pid}\t{process.display_name}{marker}\n")
    return len(processes)


def check_target_process(app_config: AppConfig) -> None:
    """
    Check the configured pid before attaching.

    Raises:
        ValidationError: If no suitable process with that pid exists.
    """
    monitor = app_config.monitor
    if monitor.source == "jcmd":
        descriptor = find_java_process(monitor.pid)
        if descriptor is None:
            raise ValidationError(
                f"No JVM with PID {monitor.pid} found", field_name="monitor.pid", value=monitor.pid
            )
        if not descriptor.attachable:
            logger.warning(f"JVM with PID {monitor.pid} belongs to another user; attaching may fail")
        logger.info(f"Attaching to JVM: {descriptor.display_name or monitor.pid}")
    else:
        if not psutil.pid_exists(monitor.pid):
            raise ValidationError(
                f"No process with PID {monitor.pid} found", field_name="monitor.pid", value=monitor.pid
            )
        logger.info(f"Attaching to process with PID {monitor.pid}")


def run_monitor(app_config: AppConfig, transport: AbstractTransport) -> int:
    """
    Attach to the configured process and sample until stopped.

    Returns:
        Process exit code: 0 after a clean stop or a lost connection, 1 if
        attaching failed.
    """
    source = create_counter_source(app_config.monitor)
    sampler = Sampler(source)
    try:
        initial_snapshot = sampler.attach()
    except AttachError as e:
        logger.error(f"Unable to attach: {e}")
        return 1

    loop = SamplingLoop(sampler, transport, app_config.monitor.interval_seconds)

    def signal_handler(signum, frame):
        logger.info(f"Signal {signal.strsignal(signum)} received. Stopping after the current cycle...")
        loop.stop()

    previous_handlers = {
        signum: signal.signal(signum, signal_handler) for signum in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        if not transport.try_send(initial_snapshot):
            logger.warning("Discarded initial snapshot event (transport did not accept it)")
        loop.run()
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)
        sampler.detach()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the agent with the given command-line arguments.

    Returns:
        Exit code. Configuration and transport errors exit through
        ``handle_cli_error`` with code 1.
    """
    args = build_parser().parse_args(argv)
    log_stream = sys.stderr if (args.target or "").startswith("stdout://") else sys.stdout
    setup_logging(args.log_level, log_stream)

    if args.list:
        print_java_processes()
        return 0

    try:
        config_path = resolve_config_path(args.config)
        app_config = load_config(config_path, overrides=config_overrides(args))
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    # Keep events and log lines apart when events go to stdout
    if app_config.gelf.target.startswith("stdout://") and log_stream is not sys.stderr:
        setup_logging(args.log_level, sys.stderr)

    try:
        check_target_process(app_config)
    except ValidationError as e:
        handle_cli_error(
            error=e,
            context="process lookup",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    try:
        transport = create_transport(
            app_config.gelf.target,
            gelf_config=app_config.gelf,
            labels=app_config.labels.as_fields(),
            storage_config=app_config.storage,
        )
    except TransportError as e:
        handle_cli_error(
            error=e,
            context="transport setup",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    try:
        return run_monitor(app_config, transport)
    finally:
        transport.close()


def main_cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    main_cli()
