"""
Tests for backend configuration.
"""
import dataclasses

import pytest

from stathat import StatHatConfig, parse_duration


class TestParseDuration:

    @pytest.mark.parametrize('value, seconds', [
        (1, 1.0),
        (0.5, 0.5),
        ('10', 10.0),
        ('50ms', 0.05),
        ('1.5s', 1.5),
        ('2m', 120.0),
    ])
    def test_valid(self, value, seconds):
        assert parse_duration(value) == pytest.approx(seconds)

    @pytest.mark.parametrize('value', ['', 'soon', '10h', '-1s', True])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestStatHatConfig:

    def test_is_immutable(self):
        config = StatHatConfig(key='k')
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.key = 'other'

    @pytest.mark.parametrize('overrides', [
        {'connect_timeout': 0},
        {'read_timeout': -1},
        {'batch_timeout': 0},
        {'max_connections': 0},
        {'max_batch_size': 0},
        {'buffer_size': 0},
        {'transport': 'carrier-pigeon'},
    ])
    def test_validation(self, overrides):
        with pytest.raises(ValueError):
            StatHatConfig(**overrides)

    def test_from_dict_accepts_aliases(self):
        config = StatHatConfig.from_dict({
            'ezkey': 'secret',
            'debug': 'true',
            'dial-timeout': '2s',
            'response-header-timeout': '500ms',
            'max-idle-conns': '4',
            'batch-timeout': '50ms',
            'max-batch-size': 3,
            'channel-buffer-size': 20,
            'drain_on_close': False,
            'unknown-option': 'ignored',
            'transport': None,
        })

        assert config.key == 'secret'
        assert config.debug is True
        assert config.connect_timeout == pytest.approx(2.0)
        assert config.read_timeout == pytest.approx(0.5)
        assert config.max_connections == 4
        assert config.batch_timeout == pytest.approx(0.05)
        assert config.max_batch_size == 3
        assert config.buffer_size == 20
        assert config.drain_on_close is False

    def test_canonical_name_overrides_alias(self):
        config = StatHatConfig.from_dict({
            'connect_timeout': '3s',
            'dial-timeout': '1s',
        })
        assert config.connect_timeout == pytest.approx(3.0)
