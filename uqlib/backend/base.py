"""Base backend client interface.

Defines the contract the stress harness depends on, independent of the
backing key/value store. Three commands are needed to emulate a queue:
``add`` (create a topic/line key if missing), ``set`` (push) and ``get``
(pop).

All methods are blocking. Failures are reported by raising a
``BackendError`` subclass; callers decide whether an error is fatal.
"""

from abc import ABC, abstractmethod


class BackendClient(ABC):
    """Abstract base class for backend clients.

    One instance owns one connection. Instances are not shared between
    threads: every worker builds its own.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Backend address in ``host:port`` form."""
        pass

    @abstractmethod
    def add(self, key: str, value: bytes) -> None:
        """Store ``value`` only if ``key`` does not exist yet.

        Raises ``NotStoredError`` when the key already exists.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key`` unconditionally."""
        pass

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Fetch the value stored under ``key``.

        Raises ``CacheMissError`` when the key is absent.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""
        pass

    def __enter__(self) -> "BackendClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class BackendError(Exception):
    """Base exception for backend operations."""
    pass


class BackendConnectionError(BackendError):
    """Network-level failure talking to the backend."""
    pass


class CacheMissError(BackendError):
    """Key not found in the backend."""
    pass


class NotStoredError(BackendError):
    """Backend refused to store the item (e.g. ``add`` on an existing key)."""
    pass
