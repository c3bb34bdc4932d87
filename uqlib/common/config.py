"""Configuration management for UQ stress runs.

This module centralizes the settings of a single stress run. It builds on
``pydantic_settings.BaseSettings`` so every knob can be provided via CLI
flags, environment variables (``UQ_*``), ``.env`` files, or defaults.

Highlights
- One immutable ``RunConfig`` per run; it is frozen after validation
- Derived values (address, keys, per-worker count) live on the model so
  workers never recompute them differently
- No deadline on backend calls unless ``timeout``/``connect_timeout`` are set

Usage
- Build from flags in the CLI: ``config = RunConfig(**overrides)``
- Or purely from the environment: ``config = get_config()``
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OperationMode(str, Enum):
    """Queue operation exercised by a run."""

    PUSH = "push"  # write-mode: ``set`` on the topic key
    POP = "pop"  # read-mode: ``get`` on the topic/line key

    @property
    def operation(self) -> str:
        """Backend command issued by workers in this mode."""
        return "set" if self is OperationMode.PUSH else "get"


class BackendType(str, Enum):
    """Supported backend client implementations."""

    MEMCACHE = "memcache"
    MEMORY = "memory"


class ConfigurationError(ValueError):
    """Raised when user input cannot describe a valid run."""


SUPPORTED_MODES = tuple(mode.value for mode in OperationMode)
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RunConfig(BaseSettings):
    """Immutable configuration for one stress run.

    Parameters are read from keyword arguments first, then from environment
    variables prefixed with ``UQ_`` (e.g. ``UQ_CONCURRENCY``), then defaults.

    Notes
    - ``timeout`` and ``connect_timeout`` default to ``None``: backend calls
      block until the server answers.
    - ``run_timeout`` bounds the wait for worker completion; ``None`` waits
      forever.
    """

    model_config = SettingsConfigDict(
        env_prefix="UQ_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Backend
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=11211, ge=1, le=65535)
    backend: BackendType = Field(default=BackendType.MEMCACHE)
    timeout: Optional[float] = Field(default=None, gt=0)
    connect_timeout: Optional[float] = Field(default=None, gt=0)

    # Workload
    mode: OperationMode = Field(default=OperationMode.PUSH)
    topic: str = Field(default="StressTestTool", min_length=1)
    line: str = Field(default="Line", min_length=1)
    count: int = Field(default=10000, ge=0)
    concurrency: int = Field(default=10, ge=1)
    run_timeout: Optional[float] = Field(default=None, gt=0)

    # Logging
    log_level: str = Field(default="INFO")  # upper-cased on validation
    log_format: Literal["console", "json"] = Field(default="console")
    log_dir: str = Field(default=".")

    # Metrics
    metrics_file: Optional[str] = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def address(self) -> str:
        """Backend address in ``host:port`` form."""
        return f"{self.host}:{self.port}"

    @property
    def write_key(self) -> str:
        """Key targeted by ``push`` runs (the bare topic)."""
        return self.topic

    @property
    def read_key(self) -> str:
        """Key targeted by ``pop`` runs (``topic/line``)."""
        return f"{self.topic}/{self.line}"

    @property
    def target_key(self) -> str:
        """Key targeted by workers for the configured mode."""
        return self.write_key if self.mode is OperationMode.PUSH else self.read_key

    @property
    def per_worker_count(self) -> int:
        """Operations per worker; the remainder of ``count`` is dropped."""
        return self.count // self.concurrency

    @property
    def attempted_count(self) -> int:
        """Operations actually issued across all workers."""
        return self.per_worker_count * self.concurrency


def validate_mode(mode: str) -> OperationMode:
    """Translate a raw mode string, raising ``ConfigurationError`` if unknown."""
    try:
        return OperationMode(mode)
    except ValueError:
        raise ConfigurationError(f"Unsupported test method: {mode}")


def get_config(**overrides: Any) -> RunConfig:
    """Build a ``RunConfig`` from the environment plus explicit overrides.

    ``None`` overrides are dropped so unset CLI flags fall through to the
    environment and then to the defaults.
    """
    return RunConfig(**{key: value for key, value in overrides.items() if value is not None})

