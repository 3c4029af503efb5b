"""
Factory for creating transports from a target URL.

Supported targets:
- ``udp://host:port``
- ``tcp://host:port``
- ``stdout://``
- ``parquet://<path>``
"""

import logging
from typing import Dict, Optional
from urllib.parse import urlsplit

from ..config.storage_config import StorageConfig
from ..models import GelfConfig
from .base import AbstractTransport, TransportError
from .parquet import ParquetTransport
from .stdout import StdoutTransport
from .tcp import TcpGelfTransport
from .udp import UdpGelfTransport

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("udp", "tcp", "stdout", "parquet")


def _host_and_port(target: str):
    try:
        parts = urlsplit(target)
        port = parts.port
    except ValueError as e:
        raise TransportError(f"Invalid transport target '{target}': {e}") from e
    if not parts.hostname or port is None:
        raise TransportError(f"Transport target '{target}' must have the form scheme://host:port")
    return parts.hostname, port


def create_transport(
    target: str,
    gelf_config: Optional[GelfConfig] = None,
    labels: Optional[Dict[str, str]] = None,
    storage_config: Optional[StorageConfig] = None,
) -> AbstractTransport:
    """
    Create a transport for the given target.

    Args:
        target: Transport URL
        gelf_config: Socket and queue settings; defaults apply when omitted
        labels: Fields added to every event
        storage_config: Settings for the parquet sink

    Returns:
        An open AbstractTransport

    Raises:
        TransportError: If the target is malformed or cannot be opened
    """
    gelf_config = gelf_config or GelfConfig(target=target)
    scheme, separator, rest = target.partition("://")
    scheme = scheme.lower()
    if not separator or scheme not in SUPPORTED_SCHEMES:
        raise TransportError(
            f"Unsupported transport target '{target}'. "
            f"Supported schemes are: {', '.join(s + '://' for s in SUPPORTED_SCHEMES)}"
        )

    logger.debug(f"Creating {scheme} transport for '{target}'")
    if scheme == "udp":
        host, port = _host_and_port(target)
        return UdpGelfTransport(
            host,
            port,
            labels=labels,
            compress=gelf_config.compress,
            send_buffer_size=gelf_config.send_buffer_size,
        )
    elif scheme == "tcp":
        host, port = _host_and_port(target)
        return TcpGelfTransport(
            host,
            port,
            labels=labels,
            queue_size=gelf_config.queue_size,
            connect_timeout=gelf_config.connect_timeout,
            reconnect_delay=gelf_config.reconnect_delay,
            tcp_no_delay=gelf_config.tcp_no_delay,
            send_buffer_size=gelf_config.send_buffer_size,
        )
    elif scheme == "stdout":
        return StdoutTransport(labels=labels)
    else:
        return ParquetTransport(rest, labels=labels, storage_config=storage_config)
