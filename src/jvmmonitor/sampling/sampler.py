"""
Sampler lifecycle state machine.

A Sampler owns one counter source and the most recent snapshot taken from
it. It moves from DETACHED to ATTACHED on a successful ``attach()`` and back
to DETACHED on ``detach()`` or when a read fails. A sampler is single-use:
monitoring again after a detach requires a new instance.
"""

import logging
from enum import Enum
from typing import Optional, TYPE_CHECKING

from ..models import Snapshot
from .exceptions import AttachError, ConnectionLost, ReadError, SamplerStateError
from .rates import build_snapshot

if TYPE_CHECKING:
    from ..sources.base import CounterSource

logger = logging.getLogger(__name__)


class SamplerState(Enum):
    """Lifecycle states of a Sampler."""
    DETACHED = "detached"
    ATTACHED = "attached"


class Sampler:
    """
    Samples a counter source and turns consecutive reads into snapshots.

    All methods are meant to be called from one thread. Every cycle either
    fully replaces the stored snapshot or leaves the sampler detached; a
    failing cycle never leaves a half-updated state behind.
    """

    def __init__(self, source: "CounterSource"):
        """
        Args:
            source: The counter source to attach to. Not connected yet.
        """
        self.source = source
        self._state = SamplerState.DETACHED
        self._last_snapshot: Optional[Snapshot] = None
        self._used = False

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def last_snapshot(self) -> Optional[Snapshot]:
        """The snapshot the next delta is computed against, None when detached."""
        return self._last_snapshot

    def is_attached(self) -> bool:
        """Return True while samples can be taken."""
        return self._state is SamplerState.ATTACHED

    def attach(self) -> Snapshot:
        """
        Connect the counter source and take the initial snapshot.

        The initial snapshot has every load set to exactly 0 and seeds the
        cumulative counters for the next cycle.

        Returns:
            The initial Snapshot.

        Raises:
            AttachError: If the source refuses the connection or the first
                read fails. The sampler stays DETACHED and may
                attach again.
            SamplerStateError: If this sampler was attached before.
        """
        if self._state is SamplerState.ATTACHED:
            raise SamplerStateError("Sampler is already attached")
        if self._used:
            raise SamplerStateError("Sampler was detached; create a new sampler to attach again")

        description = self.source.description
        try:
            self.source.connect()
        except AttachError:
            raise
        except Exception as e:
            raise AttachError(f"Unable to connect to {description}: {e}") from e

        try:
            counters = self.source.read()
        except Exception as e:
            self._release_source()
            raise AttachError(f"Initial read from {description} failed: {e}") from e

        snapshot = build_snapshot(counters)
        self._last_snapshot = snapshot
        self._state = SamplerState.ATTACHED
        self._used = True
        logger.info(f"Attached to {description}")
        return snapshot

    def sample(self) -> Snapshot:
        """
        Read the counters and compute a new snapshot.

        Returns:
            The new Snapshot, which also becomes the base for the next cycle.

        Raises:
            ConnectionLost: If the read fails. The sampler is DETACHED
                afterwards and must not be sampled again.
            SamplerStateError: If the sampler is not attached.
        """
        if self._state is not SamplerState.ATTACHED or self._last_snapshot is None:
            raise SamplerStateError("Sampler is not attached")

        try:
            counters = self.source.read()
        except (ReadError, OSError) as e:
            logger.error(f"Connection to {self.source.description} lost: {e}")
            self.detach()
            raise ConnectionLost(f"Connection to {self.source.description} lost") from e

        snapshot = build_snapshot(counters, self._last_snapshot)
        self._last_snapshot = snapshot
        return snapshot

    def detach(self) -> None:
        """
        Release the counter source and move to DETACHED.

        Safe to call any number of times, including before ``attach()``.
        Errors raised while releasing the source are logged and ignored.
        """
        was_attached = self._state is SamplerState.ATTACHED
        self._state = SamplerState.DETACHED
        self._last_snapshot = None
        if was_attached:
            self._release_source()
            logger.info(f"Detached from {self.source.description}")

    def _release_source(self) -> None:
        try:
            self.source.disconnect()
        except Exception as e:
            logger.debug(f"Ignoring error while disconnecting {self.source.description}: {e}")
