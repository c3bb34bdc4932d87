"""Shared fixtures for the stress harness tests."""

import logging
import os
import socket
from typing import Callable

import pytest
import structlog

from uqlib.common.config import RunConfig

from tests.fakes import BackendRecorder


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep ``UQ_*`` variables from the host out of ``RunConfig``."""
    for name in list(os.environ):
        if name.upper().startswith("UQ_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any ``configure_logging`` call made by a test."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


@pytest.fixture
def make_config() -> Callable[..., RunConfig]:
    """Build a ``RunConfig`` with small defaults suited to tests."""
    def _make(**overrides) -> RunConfig:
        params = {"concurrency": 4, "count": 100}
        params.update(overrides)
        return RunConfig(**params)

    return _make


@pytest.fixture
def recorder() -> BackendRecorder:
    return BackendRecorder()


@pytest.fixture
def free_port() -> int:
    """A local TCP port with nothing listening on it."""
    s = socket.socket()
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port
