"""
StatHat backend for the stats facade.

Stats are queued by the caller and sent from a background thread in batches,
so reporting never waits on the network. Delivery is best effort: a batch
that fails to send is logged and dropped.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from stats.backend import Backend

from .batcher import Batcher
from .config import StatHatConfig
from .errors import BackendClosedError, QueueClosedError
from .event_queue import EventQueue
from .events import CountStat, ValueStat
from .transport import Transport, create_transport

logger = logging.getLogger(__name__)


class StatHatBackend(Backend):
    """Backend batching stats to the StatHat EZ API."""

    def __init__(self, config: Optional[StatHatConfig] = None, transport: Optional[Transport] = None):
        """
        Initialize the backend. Nothing runs until start() or the first stat.

        Args:
            config (StatHatConfig, optional): Configuration. Defaults to values from the environment.
            transport (Transport, optional): Transport to use instead of the configured one
        """
        self.config = config or StatHatConfig()
        self.transport = transport
        self.events: Optional[EventQueue] = None
        self.batcher: Optional[Batcher] = None
        self.executor: Optional[ThreadPoolExecutor] = None
        self.thread: Optional[threading.Thread] = None
        self._started = False
        self._closed = False
        self._lock = threading.Lock()

        if not self.config.key and self.config.transport in ('pooled', 'direct'):
            logger.warning("No StatHat key configured, stats will be rejected")

    @property
    def started(self) -> bool:
        return self._started

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """
        Start the background batching thread. Safe to call more than once.

        Raises:
            BackendClosedError: If the backend was already closed
        """
        if self._started:
            return
        with self._lock:
            if self._closed:
                raise BackendClosedError("stathat backend is closed")
            if self._started:
                return
            if self.transport is None:
                self.transport = create_transport(self.config)
            self.events = EventQueue(self.config.buffer_size)
            self.executor = ThreadPoolExecutor(
                max_workers=self.config.max_connections,
                thread_name_prefix='stathat-flush',
            )
            self.batcher = Batcher(self.config, self.events, self.transport, self.executor)
            self.thread = threading.Thread(
                target=self.batcher.run,
                name='stathat-batcher',
                daemon=True,
            )
            self.thread.start()
            self._started = True
        logger.debug("StatHat backend started (transport=%s, batch_timeout=%ss, max_batch_size=%d)",
                     type(self.transport).__name__, self.config.batch_timeout,
                     self.config.max_batch_size)

    def _put(self, stat) -> None:
        if not self._started:
            if self._closed:
                raise QueueClosedError("stathat backend is closed")
            self.start()
        self.events.put(stat)

    def count(self, name: str, count: int) -> None:
        self._put(CountStat(name=name, count=count))

    def record(self, name: str, value: float) -> None:
        self._put(ValueStat(name=name, value=value))

    def inc(self, name: str) -> None:
        self.count(name, 1)

    def close(self) -> Optional[Exception]:
        """
        Flush what is queued and stop the background thread.

        Blocks until the final batch has been sent. With drain_on_close, also
        waits for batches dispatched earlier that are still in flight.

        Returns:
            Exception: The error from the final flush, or None

        Raises:
            BackendClosedError: If called a second time
        """
        with self._lock:
            if self._closed:
                raise BackendClosedError("stathat backend already closed")
            self._closed = True
            started = self._started

        if not started:
            if self.transport is not None:
                self.transport.close()
            return None

        self.events.close()
        self.batcher.terminated.wait()
        self.thread.join()

        drain = self.config.drain_on_close
        self.executor.shutdown(wait=drain)
        if drain:
            self.transport.close()
        logger.debug("StatHat backend closed")
        return self.batcher.final_error

    def __enter__(self) -> 'StatHatBackend':
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self._closed:
            error = self.close()
            if error is not None:
                logger.error("stathat: final flush failed: %s", error)
