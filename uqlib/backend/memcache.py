"""Memcache implementation of the backend client.

Talks the memcache text protocol through ``pymemcache``. Every command is
sent with ``noreply=False`` so a refused store is visible to the caller
rather than silently acknowledged.

Connection management
- The socket is opened lazily on the first command
- After a network error ``pymemcache`` drops the socket; the next command
  reconnects, so one unreachable server yields one error per call
- ``timeout``/``connect_timeout`` of ``None`` block until the server answers
"""

from typing import Optional

from pymemcache.client.base import Client
from pymemcache.exceptions import MemcacheError

from .base import (
    BackendClient,
    BackendConnectionError,
    BackendError,
    CacheMissError,
    NotStoredError,
)


class MemcacheBackendClient(BackendClient):
    """Memcache implementation of ``BackendClient``."""

    def __init__(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
    ):
        """Configure a memcache-backed client.

        Parameters
        - host, port: Memcache server location
        - timeout: Seconds to wait for a reply (``None`` waits forever)
        - connect_timeout: Seconds to wait for the TCP connect
        """
        self.host = host
        self.port = port
        self._client = Client(
            (host, port),
            timeout=timeout,
            connect_timeout=connect_timeout,
        )

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def add(self, key: str, value: bytes) -> None:
        stored = self._execute("add", self._client.add, key, value, noreply=False)
        if not stored:
            raise NotStoredError(f"memcache: item not stored: {key}")

    def set(self, key: str, value: bytes) -> None:
        stored = self._execute("set", self._client.set, key, value, noreply=False)
        if not stored:
            raise NotStoredError(f"memcache: item not stored: {key}")

    def get(self, key: str) -> bytes:
        value = self._execute("get", self._client.get, key)
        if value is None:
            raise CacheMissError("memcache: cache miss")
        return value

    def close(self) -> None:
        self._client.close()

    def _execute(self, command: str, func, *args, **kwargs):
        """Run a pymemcache call, translating failures to ``BackendError``."""
        try:
            return func(*args, **kwargs)
        except MemcacheError as e:
            raise BackendError(f"memcache {command} failed: {e}") from e
        except OSError as e:
            raise BackendConnectionError(
                f"memcache {command} to {self.address} failed: {e}"
            ) from e
