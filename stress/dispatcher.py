"""Fan-out/fan-in of stress workers.

The dispatcher splits the requested operation count evenly across
``concurrency`` workers, starts them all at once on their own threads and
then blocks until it has drained one completion signal per worker from a
shared queue. Signals are fungible: they are drained in arrival order and
never matched to a particular worker.

Execution model
- One daemon thread per worker; each thread runs in a copy of the caller's
  context so bound log context reaches worker log lines
- The completion queue is the only object shared between threads
- ``run_timeout=None`` (the default) waits forever for stalled workers
"""

import contextvars
import queue
import threading
from typing import List, Optional

import structlog

from uqlib.backend.factory import ClientFactory
from uqlib.common.config import RunConfig
from uqlib.common.metrics import MetricsCollector

from .worker import Worker, WorkerTask

logger = structlog.get_logger("stress.dispatcher")


class DispatchTimeoutError(Exception):
    """Workers did not all complete within ``run_timeout``."""

    def __init__(self, drained: int, expected: int, timeout: float):
        super().__init__(
            f"only {drained}/{expected} workers completed within {timeout:.3f}s"
        )
        self.drained = drained
        self.expected = expected


def partition(total: int, workers: int) -> List[WorkerTask]:
    """Split ``total`` operations into ``workers`` equal tasks.

    Uses floor division; the remainder ``total % workers`` is dropped rather
    than assigned to any worker.
    """
    if workers < 1:
        raise ValueError(f"worker count must be positive, got {workers}")
    per_worker = total // workers
    return [WorkerTask(index=cn, count=per_worker) for cn in range(workers)]


class Dispatcher:
    """Launches workers for a ``RunConfig`` and waits for all of them."""

    def __init__(
        self,
        config: RunConfig,
        client_factory: ClientFactory,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.config = config
        self.client_factory = client_factory
        self.metrics = metrics
        self.workers: List[Worker] = []

    def dispatch(self) -> int:
        """Run every worker to completion.

        Returns the number of completion signals drained, which always equals
        ``config.concurrency``. Raises ``DispatchTimeoutError`` only when a
        ``run_timeout`` is configured and expires.
        """
        config = self.config
        tasks = partition(config.count, config.concurrency)
        dropped = config.count - config.attempted_count
        if dropped:
            logger.debug(
                "Remainder dropped",
                count=config.count,
                concurrency=config.concurrency,
                dropped=dropped,
            )

        completion: "queue.Queue[bool]" = queue.Queue()
        self.workers = [
            Worker(config, task, self.client_factory, completion, metrics=self.metrics)
            for task in tasks
        ]

        for worker in self.workers:
            ctx = contextvars.copy_context()
            thread = threading.Thread(
                target=ctx.run,
                args=(worker.run,),
                name=f"uq-worker-{worker.task.label}",
                daemon=True,
            )
            thread.start()

        return self._drain(completion, len(self.workers))

    def _drain(self, completion: "queue.Queue[bool]", expected: int) -> int:
        operation = self.config.mode.operation
        for i in range(expected):
            try:
                completion.get(timeout=self.config.run_timeout)
            except queue.Empty:
                logger.error(
                    "Workers did not complete in time",
                    drained=i,
                    expected=expected,
                    run_timeout=self.config.run_timeout,
                )
                raise DispatchTimeoutError(i, expected, self.config.run_timeout)
            if self.metrics:
                self.metrics.record_worker_completed(operation)
            logger.info(f"{operation} single succ", key=self.config.target_key, worker=f"c{i}")
        return expected

    @property
    def attempted(self) -> int:
        """Operations attempted by the workers of the last dispatch."""
        return sum(worker.attempted for worker in self.workers)

    @property
    def failed(self) -> int:
        """Operations that failed in the last dispatch."""
        return sum(worker.failed for worker in self.workers)
