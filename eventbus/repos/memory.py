"""In-memory, identity-keyed store of subscriber handlers."""

from __future__ import annotations

import threading
from typing import Any

from eventbus.domain.handlers import Handler


class SubscriberRegistry:
    """Dict-backed store of handler tuples, keyed by subscriber identity.

    Entries are keyed by ``id(subscriber)`` and keep a strong reference to the
    subscriber, so the id cannot be reused while it is registered. A plain lock
    guards the dict; readers take a copy of the values and iterate outside it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._store: dict[int, tuple[Any, tuple[Handler, ...]]] = {}

    def put(self, subscriber: Any, handlers: tuple[Handler, ...]) -> None:
        if not handlers:
            raise ValueError("refusing to store a subscriber without handlers")
        with self._lock:
            self._store[id(subscriber)] = (subscriber, handlers)

    def get(self, subscriber: Any) -> tuple[Handler, ...] | None:
        entry = self._store.get(id(subscriber))
        if entry is None or entry[0] is not subscriber:
            return None
        return entry[1]

    def remove(self, subscriber: Any) -> bool:
        with self._lock:
            entry = self._store.get(id(subscriber))
            if entry is None or entry[0] is not subscriber:
                return False
            del self._store[id(subscriber)]
            return True

    def clear(self) -> int:
        with self._lock:
            removed = len(self._store)
            self._store = {}
        return removed

    def snapshot(self) -> list[tuple[Handler, ...]]:
        """Return the handler tuples registered at this moment."""
        with self._lock:
            return [handlers for _, handlers in self._store.values()]

    def __contains__(self, subscriber: Any) -> bool:
        return self.get(subscriber) is not None

    def __len__(self) -> int:
        return len(self._store)
