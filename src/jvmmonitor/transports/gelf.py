"""
GELF 1.1 message construction and encoding.

A snapshot becomes one GELF message with the short message
``jvm-information`` at INFO level. Every measured figure is an additional
field (prefixed with ``_``). The configured labels are added as
``_application`` and ``_deployment_unit``.
"""

import json
import os
import time
import zlib
from typing import Any, Dict, List, Optional

from ..models import DetailedGcAccounting, Snapshot

GELF_VERSION = "1.1"
SHORT_MESSAGE = "jvm-information"
# syslog severity "informational"
LEVEL_INFO = 6

CHUNK_MAGIC = b"\x1e\x0f"
MAX_CHUNK_SIZE = 8192
CHUNK_HEADER_SIZE = 12
MAX_CHUNKS = 128


class GelfEncodingError(ValueError):
    """The encoded message does not fit into the allowed number of chunks."""


def _collector_list(names) -> str:
    return ",".join(names)


def build_gelf_message(
    snapshot: Snapshot,
    labels: Optional[Dict[str, str]] = None,
    timestamp: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Build the GELF message for one snapshot.

    Args:
        snapshot: The snapshot to report.
        labels: Extra fields added to the message, without the leading
            underscore (``application``, ``deployment_unit``).
        timestamp: Wall-clock time in seconds since the epoch. Defaults to
            the current time; the snapshot itself only carries monotonic
            time.

    Returns:
        The message as a JSON-serializable dictionary.
    """
    message: Dict[str, Any] = {
        "version": GELF_VERSION,
        "host": snapshot.host_identity,
        "short_message": SHORT_MESSAGE,
        "timestamp": round(time.time() if timestamp is None else timestamp, 3),
        "level": LEVEL_INFO,
    }
    for name, value in (labels or {}).items():
        if value:
            message[f"_{name}"] = value

    message["_cpu_load"] = snapshot.cpu_load
    message["_daemon_thread_count"] = snapshot.daemon_thread_count
    message["_thread_count"] = snapshot.thread_count

    gc = snapshot.gc
    message["_gc_load"] = gc.load
    message["_gc_count"] = gc.delta_count
    if isinstance(gc, DetailedGcAccounting):
        message["_gc_old_gen_load"] = gc.old_load
        message["_gc_old_gen_count"] = gc.old_delta_count
        message["_gc_old_gen_collectors"] = _collector_list(gc.old_collectors)
        message["_gc_young_gen_load"] = gc.young_load
        message["_gc_young_gen_count"] = gc.young_delta_count
        message["_gc_young_gen_collectors"] = _collector_list(gc.young_collectors)

    message["_heap_max"] = snapshot.heap.max
    message["_heap_size"] = snapshot.heap.committed
    message["_heap_used"] = snapshot.heap.used
    message["_loaded_classes"] = snapshot.loaded_classes
    message["_non_heap_max"] = snapshot.non_heap.max
    message["_non_heap_size"] = snapshot.non_heap.committed
    message["_non_heap_used"] = snapshot.non_heap.used
    return message


def encode_message(message: Dict[str, Any]) -> bytes:
    """Serialize a GELF message to compact UTF-8 JSON."""
    return json.dumps(message, separators=(",", ":")).encode("utf-8")


def compress_payload(payload: bytes) -> bytes:
    """Compress a payload with zlib, which GELF receivers detect by its header."""
    return zlib.compress(payload)


def chunk_payload(payload: bytes, message_id: Optional[bytes] = None) -> List[bytes]:
    """
    Split a payload into GELF datagrams.

    Payloads up to ``MAX_CHUNK_SIZE`` bytes are sent as a single datagram
    unchanged. Larger payloads are split into chunks, each prefixed with the
    magic bytes, an 8-byte message id, the sequence number and the chunk
    count.

    Raises:
        GelfEncodingError: If more than ``MAX_CHUNKS`` chunks are needed.
    """
    if len(payload) <= MAX_CHUNK_SIZE:
        return [payload]

    body_size = MAX_CHUNK_SIZE - CHUNK_HEADER_SIZE
    count = (len(payload) + body_size - 1) // body_size
    if count > MAX_CHUNKS:
        raise GelfEncodingError(
            f"GELF message of {len(payload)} bytes needs {count} chunks, at most {MAX_CHUNKS} allowed"
        )

    message_id = message_id if message_id is not None else os.urandom(8)
    if len(message_id) != 8:
        raise GelfEncodingError("GELF message id must be 8 bytes")

    chunks = []
    for sequence in range(count):
        body = payload[sequence * body_size:(sequence + 1) * body_size]
        chunks.append(CHUNK_MAGIC + message_id + bytes((sequence, count)) + body)
    return chunks
