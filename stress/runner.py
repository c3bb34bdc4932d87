"""End-to-end stress run for the UQ queue emulation.

Ties together queue preparation, dispatch and reporting:

    Init -> Dispatching -> Reporting -> Done

Queue preparation (``add`` of the topic and topic/line keys) happens in
``Init`` and is excluded from the measured window. Backend failures never
move the run to a failure state; they only show up as log lines.
"""

from enum import Enum
from typing import Optional, TextIO

import structlog

from uqlib.backend.base import BackendError
from uqlib.backend.factory import ClientFactory, create_client_factory
from uqlib.common.config import RunConfig
from uqlib.common.metrics import MetricsCollector

from .dispatcher import Dispatcher
from .reporter import Reporter, RunReport

logger = structlog.get_logger("stress.runner")


class RunState(Enum):
    """Lifecycle of a stress run."""
    INIT = "init"
    DISPATCHING = "dispatching"
    REPORTING = "reporting"
    DONE = "done"


class StressTest:
    """One stress run against a backend."""

    def __init__(
        self,
        config: RunConfig,
        client_factory: Optional[ClientFactory] = None,
        metrics: Optional[MetricsCollector] = None,
        out: Optional[TextIO] = None,
    ):
        self.config = config
        self.client_factory = client_factory or create_client_factory(config)
        self.metrics = metrics or MetricsCollector(f"uq-{config.mode.value}")
        self.dispatcher = Dispatcher(config, self.client_factory, metrics=self.metrics)
        self.reporter = Reporter(config.count, out=out, metrics=self.metrics)
        self.state = RunState.INIT

    def prepare_queue(self) -> None:
        """Make sure the topic and topic/line keys exist.

        ``add`` failures (typically "already exists") are logged and ignored.
        """
        with self.client_factory() as client:
            for key in (self.config.write_key, self.config.read_key):
                try:
                    client.add(key, b"")
                    self.metrics.record_setup(True)
                except BackendError as e:
                    self.metrics.record_setup(False)
                    logger.warning("add error", key=key, error=str(e))

    def run(self) -> RunReport:
        """Prepare the queue, dispatch all workers and report throughput."""
        logger.info(
            "StressTest started",
            address=self.config.address,
            mode=self.config.mode.value,
            concurrency=self.config.concurrency,
            count=self.config.count,
            per_worker=self.config.per_worker_count,
        )
        self.prepare_queue()

        self.state = RunState.DISPATCHING
        report = self.reporter.measure(self._dispatch)

        self.state = RunState.DONE
        logger.info(
            "StressTest finished",
            attempted=self.dispatcher.attempted,
            failed=self.dispatcher.failed,
        )
        if self.config.metrics_file:
            self.metrics.write_textfile(self.config.metrics_file)
        return report

    def _dispatch(self) -> int:
        drained = self.dispatcher.dispatch()
        self.state = RunState.REPORTING
        return drained
