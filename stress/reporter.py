"""Aggregate timing of the dispatch phase."""

import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TextIO

import structlog

from uqlib.common.metrics import MetricsCollector

logger = structlog.get_logger("stress.reporter")


@dataclass(frozen=True)
class RunReport:
    """Outcome of one measured dispatch."""

    total_count: int
    duration_seconds: float
    throughput: float

    @property
    def summary(self) -> str:
        return f"Spend: {self.duration_seconds:.3f}s Speed: {self.throughput:.3f} msg/s"


class Reporter:
    """Times a dispatch callable and publishes the aggregate throughput.

    Throughput is ``total_count / duration`` over the whole run, using the
    requested count even when the per-worker split dropped a remainder.
    """

    def __init__(
        self,
        total_count: int,
        out: Optional[TextIO] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.total_count = total_count
        self.out = out or sys.stdout
        self.metrics = metrics
        self.clock = clock

    def measure(self, dispatch_fn: Callable[[], Any]) -> RunReport:
        """Run ``dispatch_fn`` between two timestamps and report the result."""
        start = self.clock()
        dispatch_fn()
        end = self.clock()

        duration = end - start
        throughput = self.total_count / duration if duration > 0 else 0.0
        report = RunReport(self.total_count, duration, throughput)
        self.emit(report)
        return report

    def emit(self, report: RunReport) -> None:
        """Write the summary to the output stream and the run log."""
        print("StressTest Done!", file=self.out)
        print(report.summary, file=self.out)
        self.out.flush()

        logger.info("StressTest Done!")
        logger.info(
            report.summary,
            duration_seconds=round(report.duration_seconds, 3),
            throughput=round(report.throughput, 3),
            total_count=report.total_count,
        )
        if self.metrics:
            self.metrics.record_run(report.duration_seconds, report.throughput)
