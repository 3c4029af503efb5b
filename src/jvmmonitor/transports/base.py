"""
Defines the abstract interface for snapshot transports.

A transport receives finished snapshots from the sampling loop. ``send`` may
block briefly; ``try_send`` must not block and reports backpressure by
returning False. Transports may keep or drop the snapshots they are given but
never modify them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..models import Snapshot

logger = logging.getLogger(__name__)


class TransportError(OSError):
    """The transport target is unusable, or the transport is closed."""


class AbstractTransport(ABC):
    """
    Abstract base class for snapshot transports.

    Subclasses receive the event labels (e.g. ``application``,
    ``deployment_unit``) once and add them to every emitted event.
    """

    def __init__(self, labels: Optional[Dict[str, str]] = None):
        self.labels: Dict[str, str] = dict(labels or {})
        self._closed = False
        logger.info(f"Initializing {self.__class__.__name__} with labels: {self.labels}")

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise TransportError(f"{self.__class__.__name__} is closed")

    @abstractmethod
    def send(self, snapshot: Snapshot) -> None:
        """
        Deliver a snapshot, blocking briefly if the transport is busy.

        Raises:
            TransportError: If the transport is closed or delivery failed.
        """
        pass

    @abstractmethod
    def try_send(self, snapshot: Snapshot) -> bool:
        """
        Offer a snapshot without blocking.

        Returns:
            True if the snapshot was accepted, False if it was rejected
            (queue full, destination unreachable). A rejected snapshot is
            not kept.
        """
        pass

    def close(self) -> None:
        """Release the transport's resources. Safe to call more than once."""
        self._closed = True
