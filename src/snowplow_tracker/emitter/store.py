"""Bounded in-memory event store with batch checkout."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass

from ..errors import ConfigurationError
from ..payload import TrackerPayload


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Batch:
    """Payloads checked out together under one batch id."""
    batch_id: int
    payloads: tuple[TrackerPayload, ...]

    def __len__(self) -> int:
        return len(self.payloads)

    @property
    def is_empty(self) -> bool:
        return not self.payloads


class EventStore(ABC):
    """
    Buffer for payloads awaiting transmission.

    A payload is either pending or part of exactly one in-flight batch.
    Every checked-out batch is terminated by one call to
    `cleanup_after_sending_attempt`.
    """

    @abstractmethod
    def add_event(self, payload: TrackerPayload) -> bool:
        """Enqueue a payload. Returns False if the store is full."""
        ...

    @abstractmethod
    def get_events_batch(self, max_count: int) -> Batch:
        """Remove up to `max_count` pending payloads as a new in-flight batch."""
        ...

    @abstractmethod
    def cleanup_after_sending_attempt(self, success: bool, batch_id: int) -> list[TrackerPayload]:
        """
        Finish an in-flight batch.

        On failure the batch goes back to the head of the pending queue.
        Returns the payloads evicted to make room (empty on success).
        """
        ...

    @abstractmethod
    def size(self) -> int:
        """Number of pending payloads (excludes in-flight)."""
        ...

    @abstractmethod
    def get_all_events(self) -> list[TrackerPayload]:
        """Snapshot of pending payloads, oldest first."""
        ...

    def in_flight_size(self) -> int:
        """Number of payloads in checked-out batches."""
        return 0


class InMemoryEventStore(EventStore):
    """
    Thread-safe bounded store backed by a deque.

    One lock guards both the pending queue and the in-flight table, so each
    operation is atomic. No network I/O ever happens under the lock.

    Requeued batches go to the head of the queue; when that overflows the
    capacity, the newest pending payloads are evicted from the tail.
    """

    def __init__(self, capacity: int = 10000):
        if capacity <= 0:
            raise ConfigurationError(f"capacity must be greater than 0, got {capacity}")
        self.capacity = capacity
        self._pending: deque[TrackerPayload] = deque()
        self._in_flight: dict[int, tuple[TrackerPayload, ...]] = {}
        self._next_batch_id = 1
        self._lock = threading.Lock()

    def add_event(self, payload: TrackerPayload) -> bool:
        with self._lock:
            if len(self._pending) >= self.capacity:
                return False
            self._pending.append(payload)
            return True

    def get_events_batch(self, max_count: int) -> Batch:
        if max_count < 0:
            raise ValueError(f"max_count cannot be negative, got {max_count}")

        with self._lock:
            count = min(max_count, len(self._pending))
            payloads = tuple(self._pending.popleft() for _ in range(count))
            batch = Batch(batch_id=self._next_batch_id, payloads=payloads)
            self._next_batch_id += 1
            self._in_flight[batch.batch_id] = payloads
            return batch

    def cleanup_after_sending_attempt(self, success: bool, batch_id: int) -> list[TrackerPayload]:
        evicted: list[TrackerPayload] = []
        with self._lock:
            payloads = self._in_flight.pop(batch_id, None)
            if payloads is None or success:
                return evicted

            # Walk backwards so the batch keeps its original order at the head
            for payload in reversed(payloads):
                if len(self._pending) >= self.capacity:
                    evicted.append(self._pending.pop())
                self._pending.appendleft(payload)

        if evicted:
            logger.warning(
                f"Event buffer full: dropped {len(evicted)} newer payloads "
                f"to requeue batch {batch_id}"
            )
        return evicted

    def size(self) -> int:
        with self._lock:
            return len(self._pending)

    def get_all_events(self) -> list[TrackerPayload]:
        with self._lock:
            return list(self._pending)

    def in_flight_size(self) -> int:
        with self._lock:
            return sum(len(p) for p in self._in_flight.values())

    def in_flight_batch_ids(self) -> list[int]:
        with self._lock:
            return sorted(self._in_flight)
