"""
StatHat backend for the stats facade, batching stats to the EZ API.
"""
from .backend import StatHatBackend
from .config import StatHatConfig, parse_duration
from .errors import (
    StatHatError,
    SerializationError,
    TransportError,
    APIError,
    QueueClosedError,
    BackendClosedError,
)
from .events import CountStat, ValueStat, Batch, APIResponse
from .event_queue import EventQueue
from .transport import (
    Transport,
    HTTPTransport,
    DirectTransport,
    LoggingTransport,
    MemoryTransport,
    create_transport,
)

__all__ = [
    'StatHatBackend',
    'StatHatConfig',
    'parse_duration',
    'StatHatError',
    'SerializationError',
    'TransportError',
    'APIError',
    'QueueClosedError',
    'BackendClosedError',
    'CountStat',
    'ValueStat',
    'Batch',
    'APIResponse',
    'EventQueue',
    'Transport',
    'HTTPTransport',
    'DirectTransport',
    'LoggingTransport',
    'MemoryTransport',
    'create_transport',
]
