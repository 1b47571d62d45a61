"""
Tests for the bounded stat queue.

Test Coverage:
- FIFO delivery and timeouts
- Close semantics for producers and the consumer
- Backpressure when the queue is full
"""
import queue
import threading

import pytest

from stathat import CountStat, EventQueue, QueueClosedError, ValueStat


class TestDelivery:
    """Stats come out in the order they went in."""

    def test_fifo_order(self):
        events = EventQueue(10)
        stats = [CountStat('a', 1), ValueStat('b', 2.5), CountStat('c', 3)]
        for stat in stats:
            events.put(stat)

        assert len(events) == 3
        assert [events.get(timeout=0.1) for _ in stats] == stats
        assert len(events) == 0

    def test_get_times_out_when_empty(self):
        events = EventQueue(10)
        with pytest.raises(queue.Empty):
            events.get(timeout=0.01)

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            EventQueue(0)


class TestClose:
    """Closing is the consumer's only shutdown signal."""

    def test_put_after_close_raises(self):
        events = EventQueue(10)
        events.close()
        assert events.closed
        with pytest.raises(QueueClosedError):
            events.put(CountStat('a', 1))

    def test_get_drains_before_reporting_closed(self):
        events = EventQueue(10)
        events.put(CountStat('a', 1))
        events.put(CountStat('b', 2))
        events.close()

        assert events.get() == CountStat('a', 1)
        assert events.get() == CountStat('b', 2)
        with pytest.raises(QueueClosedError):
            events.get()

    def test_close_wakes_waiting_consumer(self):
        events = EventQueue(10)
        errors = []

        def consume():
            try:
                events.get()
            except QueueClosedError as e:
                errors.append(e)

        consumer = threading.Thread(target=consume)
        consumer.start()
        events.close()
        consumer.join(timeout=1)

        assert not consumer.is_alive()
        assert len(errors) == 1

    def test_close_twice_raises(self):
        events = EventQueue(10)
        events.close()
        with pytest.raises(QueueClosedError):
            events.close()


class TestBackpressure:
    """A full queue blocks producers instead of dropping stats."""

    def test_second_put_blocks_until_first_is_drained(self):
        events = EventQueue(1)
        events.put(CountStat('first', 1))
        done = threading.Event()

        def produce():
            events.put(CountStat('second', 1))
            done.set()

        producer = threading.Thread(target=produce)
        producer.start()

        assert not done.wait(0.1)
        assert events.get(timeout=0.1) == CountStat('first', 1)
        assert done.wait(1)
        producer.join(timeout=1)
        assert events.get(timeout=0.1) == CountStat('second', 1)

    def test_blocked_producer_fails_when_closed(self):
        events = EventQueue(1)
        events.put(CountStat('first', 1))
        errors = []

        def produce():
            try:
                events.put(CountStat('second', 1))
            except QueueClosedError as e:
                errors.append(e)

        producer = threading.Thread(target=produce)
        producer.start()
        assert errors == []
        events.close()
        producer.join(timeout=1)

        assert not producer.is_alive()
        assert len(errors) == 1
        assert events.get() == CountStat('first', 1)
