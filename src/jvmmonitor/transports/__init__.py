"""
Transports deliver finished snapshots.

GELF over UDP and TCP for log servers, JSON lines on stdout, and a Parquet
file sink for later analysis with the plotter.
"""

from .base import AbstractTransport, TransportError
from .factory import SUPPORTED_SCHEMES, create_transport
from .gelf import GelfEncodingError, build_gelf_message, chunk_payload, encode_message
from .parquet import ParquetTransport
from .stdout import StdoutTransport
from .tcp import TcpGelfTransport
from .udp import UdpGelfTransport

__all__ = [
    "AbstractTransport",
    "GelfEncodingError",
    "ParquetTransport",
    "StdoutTransport",
    "SUPPORTED_SCHEMES",
    "TcpGelfTransport",
    "TransportError",
    "UdpGelfTransport",
    "build_gelf_message",
    "chunk_payload",
    "create_transport",
    "encode_message",
]
