"""Stress worker: one sequential batch of timed backend operations.

A worker owns a single backend client for its whole lifetime and issues
``count`` blocking calls one after another. Every call is timed on its own
and reported straight to the log; nothing is buffered in memory.

Failure model
- A failed call is logged and the loop moves on to the next iteration
- The completion signal is always emitted exactly once, even when the loop
  dies on an unexpected exception
"""

import queue
import time
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from uqlib.backend.base import BackendClient, BackendError
from uqlib.backend.factory import ClientFactory
from uqlib.common.config import OperationMode, RunConfig
from uqlib.common.metrics import MetricsCollector

logger = structlog.get_logger("stress.worker")

# Fungible completion token; carries no identity.
COMPLETION_SIGNAL = True


def build_value(worker_index: int, iteration: int) -> str:
    """Value pushed by ``worker_index`` on ``iteration``; unique per run."""
    return f"Value-c{worker_index}:{iteration}"


@dataclass(frozen=True)
class WorkerTask:
    """Unit of work handed to one worker."""

    index: int
    count: int

    @property
    def label(self) -> str:
        return f"c{self.index}"


class Worker:
    """Runs one ``WorkerTask`` against its own backend client."""

    def __init__(
        self,
        config: RunConfig,
        task: WorkerTask,
        client_factory: ClientFactory,
        completion: "queue.Queue[bool]",
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.config = config
        self.task = task
        self.client_factory = client_factory
        self.completion = completion
        self.metrics = metrics
        self.clock = clock
        self.attempted = 0
        self.failed = 0

    def run(self) -> None:
        """Execute the batch, then emit the completion signal."""
        try:
            client = self.client_factory()
            try:
                if self.config.mode is OperationMode.PUSH:
                    self._run_push(client)
                else:
                    self._run_pop(client)
            finally:
                client.close()
        except Exception:
            logger.exception("worker crashed", worker=self.task.label, attempted=self.attempted)
        finally:
            self.completion.put(COMPLETION_SIGNAL)

    def _run_push(self, client: BackendClient) -> None:
        key = self.config.write_key
        for i in range(self.task.count):
            value = build_value(self.task.index, i)
            self.attempted += 1
            start = self.clock()
            try:
                client.set(key, value.encode("utf-8"))
            except BackendError as e:
                self._record(False)
                logger.error("set error", worker=self.task.label, error=str(e))
                continue
            spend_ms = (self.clock() - start) * 1000
            self._record(True)
            logger.info("set succ", key=key, value=value, spend_ms=round(spend_ms, 3))

    def _run_pop(self, client: BackendClient) -> None:
        key = self.config.read_key
        for _ in range(self.task.count):
            self.attempted += 1
            start = self.clock()
            try:
                value = client.get(key)
            except BackendError as e:
                self._record(False)
                logger.error("get error", worker=self.task.label, error=str(e))
                continue
            spend_ms = (self.clock() - start) * 1000
            self._record(True)
            logger.info(
                "get succ",
                key=key,
                value=value.decode("utf-8", errors="replace"),
                spend_ms=round(spend_ms, 3),
            )

    def _record(self, success: bool) -> None:
        if not success:
            self.failed += 1
        if self.metrics:
            self.metrics.record_operation(self.config.mode.operation, success)
