"""
Bounded, closable queue carrying stats from producers to the batcher.
"""
import queue
import threading
import time
from collections import deque
from typing import Optional

from .errors import QueueClosedError
from .events import Stat


class EventQueue:
    """
    Multi-producer, single-consumer FIFO with backpressure.

    put() blocks while the queue is full instead of dropping. close() is the
    only way to tell the consumer no more stats are coming: after it, put()
    raises and get() keeps returning queued stats until the queue is empty,
    then raises QueueClosedError.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items = deque()
        self._closed = False
        self._mutex = threading.Lock()
        self._not_empty = threading.Condition(self._mutex)
        self._not_full = threading.Condition(self._mutex)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._mutex:
            return len(self._items)

    def put(self, stat: Stat) -> None:
        """
        Enqueue a stat, blocking while the queue is full.

        Raises:
            QueueClosedError: If the queue is closed, including while waiting
        """
        with self._not_full:
            while not self._closed and len(self._items) >= self.capacity:
                self._not_full.wait()
            if self._closed:
                raise QueueClosedError("stat queue is closed")
            self._items.append(stat)
            self._not_empty.notify()

    def get(self, timeout: Optional[float] = None) -> Stat:
        """
        Dequeue the next stat.

        Args:
            timeout (float, optional): Seconds to wait. None waits forever.

        Returns:
            Stat: The oldest queued stat

        Raises:
            queue.Empty: If the timeout expires first
            QueueClosedError: If the queue is closed and drained
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._not_empty:
            while not self._items:
                if self._closed:
                    raise QueueClosedError("stat queue is closed")
                if deadline is None:
                    self._not_empty.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise queue.Empty
                self._not_empty.wait(remaining)
            stat = self._items.popleft()
            self._not_full.notify()
            return stat

    def close(self) -> None:
        """
        Stop accepting stats and wake every waiting thread.

        Raises:
            QueueClosedError: If the queue was already closed
        """
        with self._mutex:
            if self._closed:
                raise QueueClosedError("stat queue already closed")
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()
