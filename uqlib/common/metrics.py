"""Metrics collection for UQ stress runs.

Provides a thin convenience wrapper around ``prometheus_client`` so the
harness can count operations and publish the aggregate result of a run.

Design notes
- Metrics and labels are predeclared to keep label sets consistent
- One registry per collector so tests and repeated runs never collide
- Only counters and gauges: latency distributions are left to the log file
"""

from typing import Optional
from prometheus_client import Counter, Gauge, CollectorRegistry, generate_latest, write_to_textfile
import structlog

logger = structlog.get_logger("metrics")


class MetricsCollector:
    """Centralized metrics collection for a stress run.

    Parameters
    - service_name: Logical name of the run (used in log lines only)
    - registry: Optional custom ``CollectorRegistry``

    Worker threads call the ``record_*`` helpers concurrently;
    ``prometheus_client`` metrics are thread-safe.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()

        self.operations = Counter(
            'uq_operations_total',
            'Backend operations issued by workers',
            ['operation', 'status'],
            registry=self.registry
        )

        self.setup_operations = Counter(
            'uq_setup_operations_total',
            'Queue preparation operations',
            ['status'],
            registry=self.registry
        )

        self.workers_completed = Counter(
            'uq_workers_completed_total',
            'Completion signals drained by the dispatcher',
            ['operation'],
            registry=self.registry
        )

        self.run_duration = Gauge(
            'uq_run_duration_seconds',
            'Wall-clock duration of the dispatch phase',
            registry=self.registry
        )

        self.run_throughput = Gauge(
            'uq_run_throughput_ops',
            'Aggregate operations per second over the dispatch phase',
            registry=self.registry
        )

    def record_operation(self, operation: str, success: bool) -> None:
        """Count a single ``set``/``get`` attempt."""
        status = "success" if success else "error"
        self.operations.labels(operation=operation, status=status).inc()

    def record_setup(self, success: bool) -> None:
        """Count a queue preparation ``add``."""
        self.setup_operations.labels(status="success" if success else "error").inc()

    def record_worker_completed(self, operation: str) -> None:
        """Count a drained completion signal."""
        self.workers_completed.labels(operation=operation).inc()

    def record_run(self, duration: float, throughput: float) -> None:
        """Publish the aggregate result of the run."""
        self.run_duration.set(duration)
        self.run_throughput.set(throughput)

    def get_sample(self, name: str, **labels: str) -> float:
        """Return the current value of a sample (``0.0`` when absent)."""
        value = self.registry.get_sample_value(name, labels)
        return value if value is not None else 0.0

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format."""
        return generate_latest(self.registry).decode('utf-8')

    def write_textfile(self, path: str) -> None:
        """Write metrics for the node-exporter textfile collector."""
        write_to_textfile(path, self.registry)
        logger.info("Metrics written", path=path, service=self.service_name)
