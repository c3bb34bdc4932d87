"""Backend client adapters.

Primary components:
- ``base``: abstract ``BackendClient`` interface and common exceptions.
- ``memcache``: memcache text-protocol implementation via ``pymemcache``.
- ``memory``: in-process implementation for dry runs.
- ``factory``: builds a per-worker client factory from a ``RunConfig``.

Guidance:
- Construct clients through ``factory.create_client_factory`` so the harness
  stays decoupled from specific backends.
"""
