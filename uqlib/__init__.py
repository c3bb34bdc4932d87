"""Shared libraries for the UQ stress harness.

Subpackages:
- ``uqlib.common``: configuration, logging and metrics.
- ``uqlib.backend``: backend client abstractions and concrete clients.

Notes:
- Keep stress-run orchestration in ``stress``; modules here stay reusable.
"""
