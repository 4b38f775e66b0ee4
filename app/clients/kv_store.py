"""Key-value store contract shared by the token storage backends."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

class KeyValueStoreError(Exception):
    """Raised when a backend cannot complete a read or write."""

class KeyValueStore(Protocol):
    """Last-write-wins string store with per-key expiry."""

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    def get(self, key: str) -> Optional[str]:
        ...

class InMemoryKeyValueStore:
    """Process-local store used for tests and single-process deployments."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._items: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        expires_at = self._clock() + ttl_seconds
        with self._lock:
            self._items[key] = (value, expires_at)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._items[key]
                return None
            return value


class UnavailableKeyValueStore:
    """Stand-in for a configured backend that could not be opened.

    Every operation raises ``KeyValueStoreError`` so callers treat it like a
    backend outage.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        raise KeyValueStoreError(self.reason)

    def get(self, key: str) -> Optional[str]:
        raise KeyValueStoreError(self.reason)


__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "KeyValueStoreError",
    "UnavailableKeyValueStore",
]
