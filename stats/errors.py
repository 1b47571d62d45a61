"""
Exceptions raised by the stats facade.
"""


class StatsError(Exception):
    """Base class for stats facade errors."""


class BackendNotConfiguredError(StatsError):
    """Raised when a stat is reported before a backend has been set."""

    def __init__(self):
        super().__init__("no stats backend configured, call stats.set_backend() first")


class BackendAlreadySetError(StatsError):
    """Raised when a different backend is installed over an existing one."""
