"""
Exceptions raised across the sampler boundary.

Only attach failures and connection loss end a monitoring session; every
other problem degrades locally (missing counters become zero, rejected
events are dropped).
"""


class AttachError(ConnectionError):
    """The counter source could not be connected, or its first read was unusable."""


class ConnectionLost(ConnectionError):
    """The counter source stopped answering after a successful attach."""


class ReadError(OSError):
    """Raised by a counter source when a read fails because the target is gone."""


class SamplerStateError(RuntimeError):
    """A sampler operation was called in a lifecycle state that does not allow it."""
