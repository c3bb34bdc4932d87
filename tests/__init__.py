"""Tests for the UQ stress harness.

Unit tests run against fake and in-process backends. Tests under
``integration`` need a live memcache-protocol server and skip without one.
"""
