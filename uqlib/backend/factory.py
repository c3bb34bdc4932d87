"""Backend client factory.

Centralizes creation of concrete ``BackendClient`` objects so the harness
never depends on a specific store. The dispatcher receives a zero-argument
factory and calls it once per worker, which keeps every worker on its own
connection.
"""

from typing import Callable
import structlog

from ..common.config import BackendType, RunConfig
from .base import BackendClient
from .memcache import MemcacheBackendClient
from .memory import InMemoryBackendClient, InMemoryStore

logger = structlog.get_logger("backend.factory")

ClientFactory = Callable[[], BackendClient]


def create_client_factory(config: RunConfig) -> ClientFactory:
    """Return a factory producing independent clients for ``config``.

    Parameters
    - config: The run configuration; ``backend`` selects the implementation

    Returns
    - A callable building a new, unshared ``BackendClient`` on each call
    """
    if config.backend == BackendType.MEMCACHE:
        def memcache_factory() -> BackendClient:
            return MemcacheBackendClient(
                host=config.host,
                port=config.port,
                timeout=config.timeout,
                connect_timeout=config.connect_timeout,
            )

        return memcache_factory

    elif config.backend == BackendType.MEMORY:
        # Clients own separate handles but see the same data, like a server.
        store = InMemoryStore(address=f"memory:{config.address}")
        logger.info("Using in-process backend", address=store.address)

        def memory_factory() -> BackendClient:
            return InMemoryBackendClient(store)

        return memory_factory

    else:
        raise ValueError(f"Unsupported backend type: {config.backend}")
