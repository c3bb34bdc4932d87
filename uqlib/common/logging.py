"""Structured logging configuration for UQ stress runs.

This module standardizes logging across the harness using ``structlog``. Every
run writes to its own log file whose name encodes the mode, start time,
concurrency and count, so consecutive runs never interleave.

Each line carries a microsecond timestamp and the call site (file, line,
function) that produced it. Output is either JSON (for machines) or the
key/value console format (for humans reading the file with ``less``).

Typical usage
- Compute the file name with ``build_log_file_name(...)``
- Call ``configure_logging(service_name, log_level, log_format, log_file)``
- Acquire loggers via ``structlog.get_logger(name)``
"""

import logging
import os
import sys
from datetime import datetime
from typing import Any, Optional
import structlog
from structlog.stdlib import LoggerFactory, add_logger_name

LOG_TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S.%f"


def build_log_file_name(mode: str, concurrency: int, count: int, now: datetime) -> str:
    """Return the run log file name.

    Format: ``uq_<mode>_<Y>-<M>-<D>_<h>:<m>:<s>_c<concurrency>_n<count>.log``
    with unpadded date and time components.
    """
    return (
        f"uq_{mode}_{now.year}-{now.month}-{now.day}_"
        f"{now.hour}:{now.minute}:{now.second}_c{concurrency}_n{count}.log"
    )


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    log_format: str = "console",
    log_file: Optional[str] = None,
    **kwargs: Any
) -> None:
    """Configure structured logging for a run.

    Parameters
    - service_name: Logical identifier bound to each log line
    - log_level: ``DEBUG``, ``INFO``, ``WARNING``, ``ERROR`` (case-insensitive)
    - log_format: ``json`` or ``console``
    - log_file: Path of the run log; opened for append and created if absent.
      When omitted, lines go to stderr.
    - kwargs: Extra context bound to every line (e.g. ``mode="push"``)

    Raises ``OSError`` when ``log_file`` cannot be opened.
    """

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        handlers=[handler],
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    # Configure structlog
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt=LOG_TIMESTAMP_FORMAT, utc=False),
        structlog.processors.CallsiteParameterAdder(
            [
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        add_logger_name,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Add run context
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name, **kwargs)


def run_log_path(log_dir: str, mode: str, concurrency: int, count: int, now: Optional[datetime] = None) -> str:
    """Resolve the run log path inside ``log_dir``.

    The directory must already exist; the file itself is created by
    ``configure_logging``.
    """
    now = now or datetime.now()
    return os.path.join(log_dir, build_log_file_name(mode, concurrency, count, now))

