"""
Consumer loop turning queued stats into batches and flushing them.
"""
import logging
import queue
import threading
import time
from concurrent.futures import Executor, Future
from typing import Optional

from .config import StatHatConfig
from .errors import QueueClosedError, StatHatError
from .event_queue import EventQueue
from .events import Batch, CountStat, Stat, ValueStat
from .transport import Transport

logger = logging.getLogger(__name__)


class Batcher:
    """
    Accumulates stats into batches on a single thread.

    A batch is dispatched when max_batch_size stats have arrived or when
    batch_timeout has elapsed since its first stat, whichever comes first.
    The deadline is fixed by the first stat and not pushed back by later
    ones. Dispatched batches are flushed on the executor so accumulation
    never waits on the network. When the queue is closed the last batch is
    flushed on this thread and its error kept in final_error.
    """

    def __init__(self, config: StatHatConfig, events: EventQueue,
                 transport: Transport, executor: Executor):
        self.config = config
        self.events = events
        self.transport = transport
        self.executor = executor
        self.final_error: Optional[Exception] = None
        self.terminated = threading.Event()
        self._batch = self._new_batch()
        self._deadline: Optional[float] = None

    def _new_batch(self) -> Batch:
        return Batch(key=self.config.key)

    def _timeout(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def run(self) -> None:
        """Process stats until the queue is closed and drained."""
        if self.config.debug:
            logger.info("stathat: started background process")
        try:
            while True:
                try:
                    stat = self.events.get(timeout=self._timeout())
                except queue.Empty:
                    self._dispatch()
                    continue
                except QueueClosedError:
                    break
                try:
                    self._add(stat)
                except Exception:
                    logger.exception("stathat: error handling stat %r", stat)
            if self.config.debug:
                logger.info("stathat: process closed")
            self.final_error = self._flush_final()
        finally:
            self.terminated.set()

    def _add(self, stat: Stat) -> None:
        if self.config.debug:
            if isinstance(stat, CountStat):
                logger.info("stathat: count(%s, %d)", stat.name, stat.count)
            elif isinstance(stat, ValueStat):
                logger.info("stathat: value(%s, %f)", stat.name, stat.value)
        self._batch.append(stat)
        if self._deadline is None:
            self._deadline = time.monotonic() + self.config.batch_timeout
        if len(self._batch) >= self.config.max_batch_size:
            self._dispatch()

    def _take(self) -> Batch:
        batch = self._batch
        self._batch = self._new_batch()
        self._deadline = None
        return batch

    def _dispatch(self) -> Optional[Future]:
        batch = self._take()
        if not batch:
            return None
        try:
            return self.executor.submit(self.flush, batch)
        except RuntimeError as e:
            # executor already shut down
            logger.error("stathat: dropping batch of %d items: %s", len(batch), e)
            return None

    def _flush_final(self) -> Optional[Exception]:
        batch = self._take()
        if not batch:
            return None
        try:
            self.send(batch)
        except Exception as e:
            logger.error("stathat: final flush of %d items failed: %s", len(batch), e)
            return e
        return None

    def send(self, batch: Batch) -> None:
        if self.config.debug:
            logger.info("stathat: sending batch with %d items", len(batch))
        self.transport.send(batch)

    def flush(self, batch: Batch) -> bool:
        """
        Send a batch, logging instead of raising on failure.

        Returns:
            bool: True if the batch was accepted
        """
        try:
            self.send(batch)
            return True
        except StatHatError as e:
            logger.error("stathat: dropped batch of %d items: %s", len(batch), e)
        except Exception:
            logger.exception("stathat: unexpected error sending batch of %d items", len(batch))
        return False
