"""Integration tests against a live memcache-protocol server."""

import io
import os

import pytest

from stress.runner import StressTest
from uqlib.backend.base import BackendError
from uqlib.backend.memcache import MemcacheBackendClient
from uqlib.common.config import RunConfig


@pytest.fixture(scope="module")
def server():
    """Return (host, port) of a reachable server or skip."""
    host = os.environ.get("MEMCACHE_TEST_HOST", "127.0.0.1")
    port = int(os.environ.get("MEMCACHE_TEST_PORT", "11211"))
    client = MemcacheBackendClient(host, port, timeout=2.0, connect_timeout=2.0)
    try:
        client.set("uq-stress-ping", b"1")
    except BackendError:
        pytest.skip("memcache server not available")
    finally:
        client.close()
    return host, port


@pytest.mark.integration
class TestMemcacheRun:
    """Push/pop runs against ``MEMCACHE_TEST_HOST``:``MEMCACHE_TEST_PORT``."""

    def test_push_then_read_topic(self, server):
        host, port = server
        config = RunConfig(host=host, port=port, topic="UQStressIT", concurrency=4, count=40, timeout=5.0)

        report = StressTest(config, out=io.StringIO()).run()

        assert report.total_count == 40
        assert report.throughput > 0
        with MemcacheBackendClient(host, port, timeout=2.0) as client:
            assert client.get("UQStressIT").startswith(b"Value-c")

    def test_pop_reads_line_key(self, server):
        host, port = server
        config = RunConfig(host=host, port=port, topic="UQStressIT", mode="pop", concurrency=2, count=10, timeout=5.0)
        test = StressTest(config, out=io.StringIO())

        test.run()

        assert test.dispatcher.attempted == 10
        assert test.dispatcher.failed == 0
