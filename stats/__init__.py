"""
Stats facade: emit counters and values without depending on a backend.
"""
from .backend import Backend
from .collector import Collector
from .errors import StatsError, BackendNotConfiguredError, BackendAlreadySetError
from .facade import (
    Stats,
    set_backend,
    get_backend,
    reset_backend,
    record,
    count,
    inc,
)

__all__ = [
    'Backend',
    'Collector',
    'Stats',
    'StatsError',
    'BackendNotConfiguredError',
    'BackendAlreadySetError',
    'set_backend',
    'get_backend',
    'reset_backend',
    'record',
    'count',
    'inc',
]
