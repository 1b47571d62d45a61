"""
Base backend class the stats facade forwards to.
"""
from abc import ABC, abstractmethod


class Backend(ABC):
    """
    Abstract base class for all stats backends.

    Backends must implement:
    - count(): accumulate a counter delta
    - record(): accumulate a gauge value

    Both are fire-and-forget: they return nothing and must be safe to call
    from many threads at once.
    """

    @abstractmethod
    def count(self, name: str, count: int) -> None:
        """
        Increment a counter.

        Args:
            name (str): Stat name
            count (int): Amount to add
        """
        pass

    @abstractmethod
    def record(self, name: str, value: float) -> None:
        """
        Record a value.

        Args:
            name (str): Stat name
            value (float): The value to record
        """
        pass
