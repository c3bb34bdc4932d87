"""Integration test suite for runs against a real server.

Point ``MEMCACHE_TEST_HOST``/``MEMCACHE_TEST_PORT`` at a memcache-protocol server
(memcached or a UQ instance); defaults to ``127.0.0.1:11211``.
"""
