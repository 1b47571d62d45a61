"""
Shared fixtures for the stats and stathat tests.
"""
import threading

import pytest

import stats
from stathat import MemoryTransport, StatHatBackend, StatHatConfig


class RecordingBackend(stats.Backend):
    """Backend keeping every call in memory."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def count(self, name, count):
        with self._lock:
            self.calls.append(('count', name, count))

    def record(self, name, value):
        with self._lock:
            self.calls.append(('record', name, value))


@pytest.fixture(autouse=True)
def reset_default_backend():
    stats.reset_backend()
    yield
    stats.reset_backend()


@pytest.fixture
def recording_backend():
    return RecordingBackend()


@pytest.fixture
def make_config():
    def _make(**overrides):
        options = {
            'key': 'test-ezkey',
            'transport': 'memory',
            'batch_timeout': 10.0,
            'max_batch_size': 500,
            'buffer_size': 100,
        }
        options.update(overrides)
        return StatHatConfig(**options)
    return _make


@pytest.fixture
def make_backend(make_config):
    backends = []

    def _make(transport=None, **overrides):
        config = make_config(**overrides)
        transport = transport or MemoryTransport(config)
        backend = StatHatBackend(config, transport=transport)
        backends.append(backend)
        return backend, transport

    yield _make

    for backend in backends:
        if not backend.closed:
            backend.close()
