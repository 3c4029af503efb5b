"""
GELF over TCP.

Messages are null-byte terminated and uncompressed, as GELF TCP inputs
expect. Encoded messages go through a bounded queue to a background sender
thread that owns the connection and reconnects after failures. The sampling
thread never touches the socket.
"""

import logging
import queue
import socket
import threading
from typing import Dict, Optional

from ..models import Snapshot
from .base import AbstractTransport, TransportError
from .gelf import build_gelf_message, encode_message

logger = logging.getLogger(__name__)

FRAME_DELIMITER = b"\x00"
# Seconds send() waits for room in the queue.
SEND_TIMEOUT = 1.0
# Seconds close() waits for the sender thread to drain the queue.
CLOSE_TIMEOUT = 5.0
# Seconds the idle sender waits on the queue before checking for shutdown.
QUEUE_POLL_SECONDS = 0.1

_STOP = object()


class TcpGelfTransport(AbstractTransport):
    """
    Sends null-delimited GELF frames to ``host:port`` from a sender thread.

    Attributes:
        queue_size: Capacity of the outgoing queue. ``try_send`` returns
            False when it is full.
        connect_timeout: Seconds allowed for one connection attempt.
        reconnect_delay: Seconds to wait after a failed connect or send.
    """

    def __init__(
        self,
        host: str,
        port: int,
        labels: Optional[Dict[str, str]] = None,
        queue_size: int = 512,
        connect_timeout: float = 5.0,
        reconnect_delay: float = 1.0,
        tcp_no_delay: bool = True,
        send_buffer_size: Optional[int] = None,
    ):
        super().__init__(labels)
        self.address = (host, port)
        self.queue_size = queue_size
        self.connect_timeout = connect_timeout
        self.reconnect_delay = reconnect_delay
        self.tcp_no_delay = tcp_no_delay
        self.send_buffer_size = send_buffer_size

        self._queue: "queue.Queue" = queue.Queue(maxsize=queue_size)
        self._stop_event = threading.Event()
        self._sock: Optional[socket.socket] = None
        self._thread = threading.Thread(
            target=self._sender_loop, name=f"gelf-tcp-{host}:{port}", daemon=True
        )
        self._thread.start()

    def _frame(self, snapshot: Snapshot) -> bytes:
        return encode_message(build_gelf_message(snapshot, self.labels)) + FRAME_DELIMITER

    def send(self, snapshot: Snapshot) -> None:
        self._ensure_open()
        try:
            self._queue.put(self._frame(snapshot), timeout=SEND_TIMEOUT)
        except queue.Full as e:
            raise TransportError(f"GELF TCP queue for {self.address} is full") from e

    def try_send(self, snapshot: Snapshot) -> bool:
        if self._closed:
            return False
        try:
            self._queue.put_nowait(self._frame(snapshot))
        except queue.Full:
            return False
        return True

    def _connect(self) -> socket.socket:
        sock = socket.create_connection(self.address, timeout=self.connect_timeout)
        if self.tcp_no_delay:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        if self.send_buffer_size:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, self.send_buffer_size)
        logger.info(f"Connected to GELF TCP input at {self.address[0]}:{self.address[1]}")
        return sock

    def _disconnect(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError as e:
                logger.debug(f"Error closing GELF TCP socket: {e}")
            self._sock = None

    def _deliver(self, frame: bytes) -> bool:
        """Send one frame, connecting first if needed. Returns False after a failure."""
        try:
            if self._sock is None:
                self._sock = self._connect()
            self._sock.sendall(frame)
            return True
        except OSError as e:
            logger.warning(f"GELF TCP delivery to {self.address} failed: {e}")
            self._disconnect()
            return False

    def _sender_loop(self) -> None:
        pending: Optional[bytes] = None
        while True:
            if pending is None:
                try:
                    item = self._queue.get(timeout=QUEUE_POLL_SECONDS)
                except queue.Empty:
                    if self._stop_event.is_set():
                        break
                    continue
                if item is _STOP:
                    break
                pending = item
            if self._deliver(pending):
                pending = None
            elif self._stop_event.wait(self.reconnect_delay):
                break
        self._disconnect()

    def close(self) -> None:
        if self._closed:
            return
        super().close()
        try:
            self._queue.put_nowait(_STOP)
        except queue.Full:
            # The sender exits once the queue is empty
            self._stop_event.set()
        self._thread.join(timeout=CLOSE_TIMEOUT)
        if self._thread.is_alive():
            self._stop_event.set()
            logger.warning("GELF TCP sender did not drain its queue before shutdown")
