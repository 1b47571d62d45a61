"""
Exceptions raised by the StatHat backend.
"""
from typing import Optional


class StatHatError(Exception):
    """Base class for StatHat backend errors."""


class SerializationError(StatHatError):
    """A batch could not be encoded as JSON."""


class TransportError(StatHatError):
    """The request failed or the response could not be read."""


class APIError(StatHatError):
    """StatHat answered with a non-200 status."""

    def __init__(self, status: int, message: Optional[str], batch_size: int):
        self.status = status
        self.message = message
        self.batch_size = batch_size
        super().__init__(
            f"stathat api error: status={status} msg={message!r} batch_size={batch_size}"
        )


class QueueClosedError(StatHatError):
    """The event queue was closed; no more stats are accepted."""


class BackendClosedError(StatHatError):
    """The backend was already closed."""
