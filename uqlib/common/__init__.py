"""Common utilities shared across the harness.

Includes:
- ``config``: pydantic-settings based run configuration.
- ``logging``: structured logging setup with structlog and run log naming.
- ``metrics``: Prometheus counters and gauges for a run.

Import pattern:
- from uqlib.common.config import RunConfig
- from uqlib.common.logging import configure_logging
"""
