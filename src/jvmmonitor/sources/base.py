"""
Defines the abstract interface for counter sources.

A counter source is the connection to one monitored process. It yields raw
cumulative counters on demand and is owned by exactly one Sampler.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, TypeVar

from ..models import RawCounters

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CounterSource(ABC):
    """
    Abstract base class for counter sources.

    Implementations raise ``AttachError`` from ``connect()`` when the process
    cannot be reached and ``ReadError`` from ``read()`` once it is gone. A
    single counter that cannot be read is not an error: it is reported with
    its zero/empty default.
    """

    def __init__(self, pid: int):
        self.pid = pid
        logger.info(f"Initializing {self.__class__.__name__} for PID {pid}")

    @property
    def description(self) -> str:
        """Human-readable name of the monitored process, used in log messages."""
        return f"process with PID {self.pid}"

    @abstractmethod
    def connect(self) -> None:
        """
        Establish the connection to the process.

        Raises:
            AttachError: If the connection is refused.
        """
        pass

    @abstractmethod
    def read(self) -> RawCounters:
        """
        Read the current counters.

        Raises:
            ReadError: If the process can no longer be read.
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the connection. Must tolerate being called when not connected."""
        pass

    def read_optional(self, label: str, reader: Callable[[], T], default: T,
                      *recoverable: type) -> T:
        """
        Call ``reader`` and fall back to ``default`` on a recoverable error.

        Args:
            label: Name of the counter, for the debug log.
            reader: Zero-argument function returning the counter.
            default: Value used when the counter is unavailable.
            *recoverable: Exception types that mean "unavailable" rather
                than "disconnected". Anything else propagates.
        """
        try:
            return reader()
        except recoverable as e:
            logger.debug(f"Counter '{label}' unavailable for {self.description}: {e}")
            return default
