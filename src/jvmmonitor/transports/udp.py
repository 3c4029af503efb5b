"""
GELF over UDP.

Each snapshot is one GELF message, optionally zlib-compressed and chunked
when it exceeds a single datagram. UDP never blocks on the receiver, so
``try_send`` only fails when the local socket refuses the datagram.
"""

import logging
import socket
from typing import Dict, Optional

from ..models import Snapshot
from .base import AbstractTransport, TransportError
from .gelf import GelfEncodingError, build_gelf_message, chunk_payload, compress_payload, encode_message

logger = logging.getLogger(__name__)


class UdpGelfTransport(AbstractTransport):
    """Sends GELF datagrams to ``host:port``."""

    def __init__(
        self,
        host: str,
        port: int,
        labels: Optional[Dict[str, str]] = None,
        compress: bool = True,
        send_buffer_size: Optional[int] = None,
    ):
        super().__init__(labels)
        self.address = (host, port)
        self.compress = compress
        try:
            infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
            family = infos[0][0]
            self._sock = socket.socket(family, socket.SOCK_DGRAM)
        except OSError as e:
            raise TransportError(f"Cannot open UDP socket for {host}:{port}: {e}") from e
        self._sock.setblocking(False)
        if send_buffer_size:
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, send_buffer_size)

    def _datagrams(self, snapshot: Snapshot):
        payload = encode_message(build_gelf_message(snapshot, self.labels))
        if self.compress:
            payload = compress_payload(payload)
        return chunk_payload(payload)

    def send(self, snapshot: Snapshot) -> None:
        self._ensure_open()
        try:
            for datagram in self._datagrams(snapshot):
                self._sock.sendto(datagram, self.address)
        except (OSError, GelfEncodingError) as e:
            raise TransportError(f"Failed to send GELF datagram to {self.address}: {e}") from e

    def try_send(self, snapshot: Snapshot) -> bool:
        if self._closed:
            return False
        try:
            self.send(snapshot)
        except TransportError as e:
            logger.debug(f"UDP send rejected: {e}")
            return False
        return True

    def close(self) -> None:
        if not self._closed:
            self._sock.close()
        super().close()
