"""
Base collector class for reporting sampled values through the stats facade.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict

logger = logging.getLogger(__name__)


class Collector(ABC):
    """
    Abstract base class for all collectors.

    Subclasses implement collect(), returning a mapping of stat suffix to
    value. report() records each value as a gauge named "<prefix>.<suffix>".
    """

    @abstractmethod
    def collect(self) -> Dict[str, float]:
        """
        Collect values.

        Returns:
            dict: Stat suffix -> value
        """
        pass

    @property
    def name(self) -> str:
        """
        Get the name of the collector.

        Returns:
            str: The name of the collector (class name by default)
        """
        return self.__class__.__name__

    @property
    def prefix(self) -> str:
        """
        Get the stat name prefix.
        If a custom prefix was set, use that, otherwise the lowercased name
        without the "Collector" suffix.

        Returns:
            str: The prefix
        """
        custom = getattr(self, '_prefix', None)
        if custom:
            return custom
        name = self.name
        if name.endswith('Collector'):
            name = name[:-len('Collector')]
        return name.lower()

    @prefix.setter
    def prefix(self, value: str) -> None:
        self._prefix = value

    def safe_collect(self) -> Dict[str, float]:
        """
        Collect values, catching any exceptions.

        Returns:
            dict: The collected values, or an empty dict if collection fails
        """
        try:
            return self.collect()
        except Exception as e:
            logger.error("Error collecting values from %s: %s", self.name, str(e))
            return {}

    def report(self, stats) -> Dict[str, float]:
        """
        Collect and record every value through the given facade.

        Args:
            stats: A Stats facade (or the stats module itself)

        Returns:
            dict: The values that were recorded
        """
        values = self.safe_collect()
        for key, value in values.items():
            stats.record(f"{self.prefix}.{key}", float(value))
        logger.debug("%s reported %d values", self.name, len(values))
        return values
