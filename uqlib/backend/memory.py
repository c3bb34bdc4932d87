"""In-process backend used for dry runs.

Stores items in a dictionary shared by every client created from the same
``InMemoryStore``. Useful to exercise the harness (and measure its own
overhead) without a memcache server.
"""

import threading
from typing import Dict, Optional

from .base import BackendClient, CacheMissError, NotStoredError


class InMemoryStore:
    """Thread-safe key/value store standing in for a remote server."""

    def __init__(self, address: str = "memory:0"):
        self.address = address
        self._items: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def add(self, key: str, value: bytes) -> bool:
        with self._lock:
            if key in self._items:
                return False
            self._items[key] = value
            return True

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._items[key] = value

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._items.get(key)


class InMemoryBackendClient(BackendClient):
    """``BackendClient`` over an ``InMemoryStore``."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.closed = False

    @property
    def address(self) -> str:
        return self.store.address

    def add(self, key: str, value: bytes) -> None:
        if not self.store.add(key, value):
            raise NotStoredError(f"memory: item not stored: {key}")

    def set(self, key: str, value: bytes) -> None:
        self.store.set(key, value)

    def get(self, key: str) -> bytes:
        value = self.store.get(key)
        if value is None:
            raise CacheMissError("memory: cache miss")
        return value

    def close(self) -> None:
        self.closed = True
