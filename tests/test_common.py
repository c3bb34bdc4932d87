"""Tests for common utilities."""

import re
from datetime import datetime

import pytest
import structlog
from pydantic import ValidationError

from uqlib.common.config import (
    BackendType,
    ConfigurationError,
    OperationMode,
    RunConfig,
    get_config,
    validate_mode,
)
from uqlib.common.logging import build_log_file_name, configure_logging, run_log_path
from uqlib.common.metrics import MetricsCollector


def test_config_defaults():
    """Test configuration defaults match the command-line defaults."""
    config = RunConfig()
    assert config.host == "127.0.0.1"
    assert config.port == 11211
    assert config.concurrency == 10
    assert config.count == 10000
    assert config.mode is OperationMode.PUSH
    assert config.topic == "StressTestTool"
    assert config.line == "Line"
    assert config.backend is BackendType.MEMCACHE
    assert config.timeout is None
    assert config.connect_timeout is None
    assert config.run_timeout is None
    assert config.address == "127.0.0.1:11211"


def test_config_keys():
    """Push targets the bare topic, pop targets topic/line."""
    push = RunConfig(topic="Orders", line="Billing", mode="push")
    pop = RunConfig(topic="Orders", line="Billing", mode="pop")

    assert push.write_key == "Orders"
    assert push.target_key == "Orders"
    assert pop.read_key == "Orders/Billing"
    assert pop.target_key == "Orders/Billing"
    assert pop.mode.operation == "get"
    assert push.mode.operation == "set"


@pytest.mark.parametrize(
    "concurrency,count,per_worker,attempted",
    [(4, 100, 25, 100), (3, 100, 33, 99), (10, 5, 0, 0), (1, 7, 7, 7)],
)
def test_config_partitioning(concurrency, count, per_worker, attempted):
    """Test the per-worker split drops the remainder."""
    config = RunConfig(concurrency=concurrency, count=count)
    assert config.per_worker_count == per_worker
    assert config.attempted_count == attempted


def test_config_is_immutable():
    config = RunConfig()
    with pytest.raises(ValidationError):
        config.count = 5


def test_config_rejects_invalid_values():
    with pytest.raises(ValidationError):
        RunConfig(concurrency=0)
    with pytest.raises(ValidationError):
        RunConfig(count=-1)
    with pytest.raises(ValidationError):
        RunConfig(mode="sync")
    with pytest.raises(ValidationError):
        RunConfig(log_level="verbose")
    with pytest.raises(ValidationError):
        RunConfig(log_format="xml")


def test_config_normalizes_log_level():
    assert RunConfig(log_level="debug").log_level == "DEBUG"


def test_config_from_environment(monkeypatch):
    """Test environment variables feed the configuration."""
    monkeypatch.setenv("UQ_CONCURRENCY", "4")
    monkeypatch.setenv("UQ_MODE", "pop")

    config = get_config(count=None, topic="EnvTopic")
    assert config.concurrency == 4
    assert config.mode is OperationMode.POP
    assert config.count == 10000
    assert config.topic == "EnvTopic"


def test_validate_mode():
    assert validate_mode("push") is OperationMode.PUSH
    assert validate_mode("pop") is OperationMode.POP
    with pytest.raises(ConfigurationError):
        validate_mode("sync")


def test_log_file_name():
    """Test run log naming uses unpadded date and time parts."""
    now = datetime(2024, 3, 5, 7, 8, 9)
    assert build_log_file_name("push", 10, 10000, now) == "uq_push_2024-3-5_7:8:9_c10_n10000.log"
    assert run_log_path("/var/log/uq", "pop", 4, 100, now) == "/var/log/uq/uq_pop_2024-3-5_7:8:9_c4_n100.log"


def test_logging_configuration(tmp_path):
    """Test log lines carry microsecond timestamps and their call site."""
    log_file = tmp_path / "run.log"
    configure_logging("test-service", "INFO", "console", log_file=str(log_file), mode="push")

    structlog.get_logger("test").info("hello", answer=42)

    content = log_file.read_text()
    assert "hello" in content
    assert "answer=42" in content
    assert "filename=test_common.py" in content
    assert "service=test-service" in content
    assert re.search(r"\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}\.\d{6}", content)


def test_logging_appends(tmp_path):
    log_file = tmp_path / "run.log"
    log_file.write_text("previous run\n")

    configure_logging("test-service", "INFO", "json", log_file=str(log_file))
    structlog.get_logger("test").info("next run")

    lines = log_file.read_text().splitlines()
    assert lines[0] == "previous run"
    assert '"event": "next run"' in lines[1]


def test_logging_configuration_unwritable_path(tmp_path):
    with pytest.raises(OSError):
        configure_logging("test-service", log_file=str(tmp_path / "missing" / "run.log"))


def test_metrics_collector():
    """Test metrics collector."""
    collector = MetricsCollector("test-service")
    assert collector.service_name == "test-service"

    collector.record_operation("set", True)
    collector.record_operation("set", True)
    collector.record_operation("set", False)
    collector.record_worker_completed("set")
    collector.record_setup(False)
    collector.record_run(2.5, 40.0)

    assert collector.get_sample("uq_operations_total", operation="set", status="success") == 2
    assert collector.get_sample("uq_operations_total", operation="set", status="error") == 1
    assert collector.get_sample("uq_operations_total", operation="get", status="error") == 0
    assert collector.get_sample("uq_workers_completed_total", operation="set") == 1
    assert collector.get_sample("uq_setup_operations_total", status="error") == 1
    assert collector.get_sample("uq_run_throughput_ops") == 40.0

    metrics = collector.get_metrics()
    assert isinstance(metrics, str)
    assert "uq_operations_total" in metrics


def test_metrics_textfile(tmp_path):
    collector = MetricsCollector("test-service")
    collector.record_run(1.0, 100.0)

    path = tmp_path / "uq.prom"
    collector.write_textfile(str(path))
    assert "uq_run_duration_seconds 1.0" in path.read_text()
