import logging
from typing import Dict

import psutil

from stats.collector import Collector

logger = logging.getLogger(__name__)


class BatteryCollector(Collector):
    """Collector for battery charge."""

    def collect(self) -> Dict[str, float]:
        """Collect battery metrics.

        Returns:
            dict: Battery percentage and whether the charger is plugged in (1.0 or 0.0)

        Raises:
            RuntimeError: If the machine reports no battery
        """
        battery = psutil.sensors_battery()
        if battery is None:
            raise RuntimeError('No battery information available')
        return {
            'percent': float(battery.percent),
            'plugged': 1.0 if battery.power_plugged else 0.0,
        }
