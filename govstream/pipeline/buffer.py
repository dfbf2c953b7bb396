"""Bounded in-memory buffer of serialized records."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable

logger = logging.getLogger("govstream.buffer")

Subscriber = Callable[[str], None]


class BoundedQueue:
    """Fixed-capacity FIFO of serialized records with oldest-first eviction.

    Subscribers are called synchronously after every enqueue. They observe
    records only; a failing subscriber is logged and never changes the
    queue contents.
    """

    def __init__(self, capacity: int = 50):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._items: deque[str] = deque()
        self._lock = threading.Lock()
        self._subscribers: list[Subscriber] = []
        self._evicted = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def evicted_count(self) -> int:
        """Number of records evicted since creation."""
        with self._lock:
            return self._evicted

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def enqueue(self, record: str) -> str | None:
        """Append a record, evicting the oldest one when over capacity.

        Returns:
            The evicted record, if any
        """
        evicted = None
        with self._lock:
            self._items.append(record)
            if len(self._items) > self._capacity:
                evicted = self._items.popleft()
                self._evicted += 1
            subscribers = list(self._subscribers)

        for subscriber in subscribers:
            try:
                subscriber(record)
            except Exception as e:
                logger.warning(f"Queue subscriber {subscriber!r} failed: {e}")

        return evicted

    def snapshot(self) -> list[str]:
        """Return the buffered records, oldest first."""
        with self._lock:
            return list(self._items)

    def drain(self) -> list[str]:
        """Remove and return all buffered records, oldest first."""
        with self._lock:
            items = list(self._items)
            self._items.clear()
            return items

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an enqueue observer.

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe


__all__ = ["BoundedQueue", "Subscriber"]
