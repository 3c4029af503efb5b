"""
Writes each GELF message as one JSON line to standard output.
"""

import logging
import sys
from typing import Dict, Optional, TextIO

from ..models import Snapshot
from .base import AbstractTransport, TransportError
from .gelf import build_gelf_message, encode_message

logger = logging.getLogger(__name__)


class StdoutTransport(AbstractTransport):
    """JSON-lines transport, useful for piping into other tools."""

    def __init__(self, labels: Optional[Dict[str, str]] = None, stream: Optional[TextIO] = None):
        super().__init__(labels)
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so a replaced sys.stdout (e.g. under pytest) is honoured
        return self._stream if self._stream is not None else sys.stdout

    def send(self, snapshot: Snapshot) -> None:
        self._ensure_open()
        line = encode_message(build_gelf_message(snapshot, self.labels)).decode("utf-8")
        try:
            self.stream.write(line + "\n")
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise TransportError(f"Failed to write event to stdout: {e}") from e

    def try_send(self, snapshot: Snapshot) -> bool:
        if self._closed:
            return False
        try:
            self.send(snapshot)
        except TransportError as e:
            logger.debug(f"stdout write rejected: {e}")
            return False
        return True
