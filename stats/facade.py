"""
Stats facade forwarding counters and values to a pluggable backend.

Application code depends on this module only, never on a concrete transport.
Either build a Stats object around a backend and pass it around, or install a
process-wide backend once with set_backend() and use the module functions.
"""
import logging
import threading
from typing import Optional

from . import config
from .backend import Backend
from .errors import BackendAlreadySetError, BackendNotConfiguredError

logger = logging.getLogger(__name__)


class Stats:
    """Forwards stat calls to a backend, optionally logging each one."""

    def __init__(self, backend: Backend, verbose: Optional[bool] = None):
        """
        Initialize the facade.

        Args:
            backend (Backend): The backend to forward to
            verbose (bool, optional): Log every call. Defaults to config.VERBOSE.
        """
        if backend is None:
            raise BackendNotConfiguredError()
        self.backend = backend
        self.verbose = config.VERBOSE if verbose is None else verbose

    def record(self, name: str, value: float) -> None:
        """Record a value."""
        if self.verbose:
            logger.info("stats.record(%s, %f)", name, value)
        self.backend.record(name, value)

    def count(self, name: str, count: int) -> None:
        """Increment counter by given value."""
        if self.verbose:
            logger.info("stats.count(%s, %d)", name, count)
        self.backend.count(name, count)

    def inc(self, name: str) -> None:
        """Increment counter by 1."""
        self.count(name, 1)


# Singleton instance, installed once via set_backend()
default_stats: Optional[Stats] = None
_lock = threading.Lock()


def set_backend(backend: Backend, verbose: Optional[bool] = None) -> Stats:
    """
    Install the process-wide backend.

    Installing the backend that is already set is a no-op. Installing a
    different one raises.

    Args:
        backend (Backend): The backend to use
        verbose (bool, optional): Log every call. Defaults to config.VERBOSE.

    Returns:
        Stats: The default facade

    Raises:
        BackendAlreadySetError: If a different backend is already installed
    """
    global default_stats

    with _lock:
        if default_stats is not None:
            if default_stats.backend is backend:
                return default_stats
            raise BackendAlreadySetError(
                f"stats backend already set to {default_stats.backend!r}"
            )
        default_stats = Stats(backend, verbose=verbose)
        logger.debug("Installed stats backend: %r", backend)
        return default_stats


def get_backend() -> Optional[Backend]:
    """Return the installed backend, or None."""
    current = default_stats
    return current.backend if current is not None else None


def reset_backend() -> Optional[Backend]:
    """
    Remove the installed backend.

    The backend is not closed, that is left to its owner.

    Returns:
        Backend: The backend that was installed, or None
    """
    global default_stats

    with _lock:
        previous = default_stats
        default_stats = None
    return previous.backend if previous is not None else None


def _default() -> Stats:
    current = default_stats
    if current is None:
        raise BackendNotConfiguredError()
    return current


def record(name: str, value: float) -> None:
    """Record a value using the default backend."""
    _default().record(name, value)


def count(name: str, count: int) -> None:
    """Increment counter by given value using the default backend."""
    _default().count(name, count)


def inc(name: str) -> None:
    """Increment counter by 1 using the default backend."""
    _default().inc(name)
