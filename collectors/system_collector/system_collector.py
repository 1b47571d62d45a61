import logging
from typing import Dict

import psutil

from stats.collector import Collector

logger = logging.getLogger(__name__)


class SystemCollector(Collector):
    """Collector for CPU, memory and disk usage percentages."""

    def __init__(self, disk_path: str = '/', cpu_interval: float = 0.5):
        """
        Initialize the system collector.

        Args:
            disk_path (str): Mount point whose usage is reported
            cpu_interval (float): Seconds to sample CPU usage over
        """
        self.disk_path = disk_path
        self.cpu_interval = float(cpu_interval)

    def collect(self) -> Dict[str, float]:
        """Collect system usage.

        Returns:
            dict: cpu_percent, memory_percent and disk_percent
        """
        values = {
            'cpu_percent': psutil.cpu_percent(interval=self.cpu_interval),
            'memory_percent': psutil.virtual_memory().percent,
            'disk_percent': psutil.disk_usage(self.disk_path).percent,
        }
        logger.debug("System usage: %s", values)
        return values
