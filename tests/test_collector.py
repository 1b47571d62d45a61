"""
Tests for collectors reporting through the facade.
"""
from collections import namedtuple
from unittest import mock

import pytest

from collectors.battery_collector.battery_collector import BatteryCollector
from collectors.system_collector.system_collector import SystemCollector
from stats import Collector, Stats


class StaticCollector(Collector):

    def __init__(self, values):
        self.values = values

    def collect(self):
        return self.values


class FailingCollector(Collector):

    def collect(self):
        raise RuntimeError('sensor unavailable')


class TestCollector:

    def test_report_records_prefixed_values(self, recording_backend):
        collector = StaticCollector({'temp': 21, 'load': 0.5})
        values = collector.report(Stats(recording_backend, verbose=False))

        assert values == {'temp': 21, 'load': 0.5}
        assert recording_backend.calls == [
            ('record', 'static.temp', 21.0),
            ('record', 'static.load', 0.5),
        ]

    def test_custom_prefix(self, recording_backend):
        collector = StaticCollector({'temp': 1})
        collector.prefix = 'office'
        collector.report(Stats(recording_backend, verbose=False))
        assert recording_backend.calls == [('record', 'office.temp', 1.0)]

    def test_failure_reports_nothing(self, recording_backend, caplog):
        collector = FailingCollector()
        assert collector.report(Stats(recording_backend, verbose=False)) == {}
        assert recording_backend.calls == []
        assert 'sensor unavailable' in caplog.text


class TestSystemCollector:

    def test_collect(self):
        with mock.patch('collectors.system_collector.system_collector.psutil') as psutil:
            psutil.cpu_percent.return_value = 12.5
            psutil.virtual_memory.return_value.percent = 40.0
            psutil.disk_usage.return_value.percent = 70.0

            values = SystemCollector(disk_path='/data', cpu_interval=0).collect()

        assert values == {'cpu_percent': 12.5, 'memory_percent': 40.0, 'disk_percent': 70.0}
        psutil.disk_usage.assert_called_once_with('/data')
        assert SystemCollector().prefix == 'system'


class TestBatteryCollector:

    def test_collect(self):
        Battery = namedtuple('Battery', 'percent secsleft power_plugged')
        with mock.patch('collectors.battery_collector.battery_collector.psutil') as psutil:
            psutil.sensors_battery.return_value = Battery(80, 3600, True)
            assert BatteryCollector().collect() == {'percent': 80.0, 'plugged': 1.0}

    def test_no_battery(self):
        with mock.patch('collectors.battery_collector.battery_collector.psutil') as psutil:
            psutil.sensors_battery.return_value = None
            with pytest.raises(RuntimeError):
                BatteryCollector().collect()
            assert BatteryCollector().safe_collect() == {}
