"""
The sampling loop.

The loop runs one sampling cycle per interval and hands every snapshot to a
transport. A transport that cannot accept a snapshot gets no retry; the
snapshot is dropped so the sampling cadence is kept.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..transports.base import AbstractTransport
from .exceptions import ConnectionLost
from .sampler import Sampler

logger = logging.getLogger(__name__)

# Granularity of the interruptible sleep between cycles, in seconds.
SLEEP_CHUNK_SECONDS = 0.05


@dataclass
class LoopStats:
    """Summary of one run of the sampling loop."""

    cycles: int = 0
    sent: int = 0
    dropped: int = 0
    # "connection_lost", "stopped" or "max_cycles"
    stop_reason: str = ""


class SamplingLoop:
    """
    Drives an attached Sampler at a fixed interval.

    The interval is measured from the start of one cycle to the start of the
    next; a slow read delays the next cycle instead of shortening the wait.
    """

    def __init__(
        self,
        sampler: Sampler,
        transport: AbstractTransport,
        interval_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            sampler: An attached sampler.
            transport: Destination of the snapshots.
            interval_seconds: Time between the start of two cycles.
            sleep: Sleep function, replaceable in tests.
            clock: Monotonic clock in seconds, replaceable in tests.
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.sampler = sampler
        self.transport = transport
        self.interval_seconds = interval_seconds
        self._sleep = sleep
        self._clock = clock
        self._stop_requested = False

    def stop(self) -> None:
        """Ask the loop to end after the current cycle. Signal-handler safe."""
        self._stop_requested = True

    def run_cycle(self, stats: LoopStats) -> None:
        """
        Take one sample and offer it to the transport.

        Raises:
            ConnectionLost: If the sampler lost its connection.
        """
        snapshot = self.sampler.sample()
        stats.cycles += 1
        try:
            accepted = self.transport.try_send(snapshot)
        except OSError as e:
            # TransportError is an OSError
            logger.warning(f"Discarded snapshot event (transport failed: {e})")
            accepted = None
        if accepted:
            stats.sent += 1
        else:
            stats.dropped += 1
            if accepted is not None:
                logger.warning("Discarded snapshot event (transport did not accept it)")

    def run(self, max_cycles: Optional[int] = None) -> LoopStats:
        """
        Sample until the connection is lost, ``stop()`` is called, or
        ``max_cycles`` cycles have run.

        Returns:
            LoopStats describing the run.
        """
        stats = LoopStats()
        logger.info(f"Sampling loop started (interval: {self.interval_seconds}s)")

        while self.sampler.is_attached():
            if self._stop_requested:
                stats.stop_reason = "stopped"
                break
            if max_cycles is not None and stats.cycles >= max_cycles:
                stats.stop_reason = "max_cycles"
                break

            cycle_start = self._clock()
            try:
                self.run_cycle(stats)
            except ConnectionLost:
                logger.info("Connection to monitored process lost; stopping sampling loop")
                stats.stop_reason = "connection_lost"
                break

            self._wait_for_next_cycle(cycle_start)
        else:
            if not stats.stop_reason:
                stats.stop_reason = "connection_lost"

        logger.info(
            f"Sampling loop finished after {stats.cycles} cycles "
            f"({stats.sent} sent, {stats.dropped} dropped, reason: {stats.stop_reason})"
        )
        return stats

    def _wait_for_next_cycle(self, cycle_start: float) -> None:
        elapsed_time = self._clock() - cycle_start
        sleep_time = self.interval_seconds - elapsed_time
        if sleep_time <= 0:
            logger.warning(
                f"Sampling took {elapsed_time:.2f}s, longer than interval of {self.interval_seconds}s."
            )
            return

        # Sleep in chunks so stop() takes effect quickly.
        sleep_end_time = cycle_start + self.interval_seconds
        while not self._stop_requested:
            remaining = sleep_end_time - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(SLEEP_CHUNK_SECONDS, remaining))
