"""
Configuration settings for the StatHat backend.

Defaults are read from the environment once at import time; StatHatConfig
takes explicit values that override them.
"""
import os
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Union

# Server configuration
ENDPOINT = os.getenv('STATHAT_ENDPOINT', 'http://api.stathat.com/ez')
KEY = os.getenv('STATHAT_KEY', '')

# Logging configuration
DEBUG = os.getenv('STATHAT_DEBUG', 'false').lower() in ('1', 'true', 'yes', 'on')

# HTTP client configuration
CONNECT_TIMEOUT = float(os.getenv('STATHAT_CONNECT_TIMEOUT', '1'))  # seconds
READ_TIMEOUT = float(os.getenv('STATHAT_READ_TIMEOUT', '3'))  # seconds
MAX_CONNECTIONS = int(os.getenv('STATHAT_MAX_CONNECTIONS', '10'))
TRANSPORT = os.getenv('STATHAT_TRANSPORT', 'pooled')

# Batch configuration
BATCH_TIMEOUT = float(os.getenv('STATHAT_BATCH_TIMEOUT', '10'))  # seconds
MAX_BATCH_SIZE = int(os.getenv('STATHAT_MAX_BATCH_SIZE', '500'))
BUFFER_SIZE = int(os.getenv('STATHAT_BUFFER_SIZE', '10000'))  # stats queued before producers block
DRAIN_ON_CLOSE = os.getenv('STATHAT_DRAIN_ON_CLOSE', 'true').lower() in ('1', 'true', 'yes', 'on')

TRANSPORTS = ('pooled', 'direct', 'dry-run', 'memory')

# Alternate option names accepted by StatHatConfig.from_dict()
ALIASES = {
    'dial_timeout': 'connect_timeout',
    'read_write_timeout': 'read_timeout',
    'response_header_timeout': 'read_timeout',
    'max_idle_conns': 'max_connections',
    'channel_buffer_size': 'buffer_size',
    'ezkey': 'key',
}

_DURATION_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*(ms|s|m)?\s*$')
_DURATION_UNITS = {'ms': 0.001, 's': 1.0, 'm': 60.0, None: 1.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parse a duration into seconds.

    Accepts plain numbers (seconds) or strings such as "50ms", "1.5s", "2m".

    Raises:
        ValueError: If the value is not a valid duration
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"invalid duration: {value!r}")
    return float(match.group(1)) * _DURATION_UNITS[match.group(2)]


@dataclass(frozen=True)
class StatHatConfig:
    """Immutable backend configuration, fixed at startup."""
    key: str = KEY
    debug: bool = DEBUG
    connect_timeout: float = CONNECT_TIMEOUT
    read_timeout: float = READ_TIMEOUT
    max_connections: int = MAX_CONNECTIONS
    batch_timeout: float = BATCH_TIMEOUT
    max_batch_size: int = MAX_BATCH_SIZE
    buffer_size: int = BUFFER_SIZE
    endpoint: str = ENDPOINT
    transport: str = TRANSPORT
    drain_on_close: bool = DRAIN_ON_CLOSE

    def __post_init__(self):
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise ValueError("timeouts must be positive")
        if self.batch_timeout <= 0:
            raise ValueError("batch_timeout must be positive")
        if self.max_connections < 1:
            raise ValueError("max_connections must be at least 1")
        if self.max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")
        if self.buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        if self.transport not in TRANSPORTS:
            raise ValueError(f"unknown transport {self.transport!r}, expected one of {TRANSPORTS}")

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> 'StatHatConfig':
        """
        Build a configuration from a mapping such as a parsed JSON file.

        Keys may use dashes or underscores and any of the names in ALIASES.
        None values and unknown keys are ignored.

        Args:
            options (dict): Option name -> value

        Returns:
            StatHatConfig: The configuration
        """
        known = {f.name for f in fields(cls)}
        normalized = [(raw_key.replace('-', '_'), value) for raw_key, value in options.items()]
        # canonical names override their aliases
        normalized.sort(key=lambda item: item[0] not in ALIASES)
        kwargs = {}
        for key, value in normalized:
            if value is None:
                continue
            key = ALIASES.get(key, key)
            if key not in known:
                continue
            if key in ('connect_timeout', 'read_timeout', 'batch_timeout'):
                value = parse_duration(value)
            elif key in ('max_connections', 'max_batch_size', 'buffer_size'):
                value = int(value)
            elif key in ('debug', 'drain_on_close') and isinstance(value, str):
                value = value.lower() in ('1', 'true', 'yes', 'on')
            kwargs[key] = value
        return cls(**kwargs)
