"""Concurrent stress harness for the UQ queue.

Modules:
- ``worker``: one sequential batch of timed backend operations.
- ``dispatcher``: partitions the run and fans workers out and back in.
- ``reporter``: wall-clock timing and aggregate throughput.
- ``runner``: queue preparation and the run lifecycle.
- ``cli``: the ``uq-stress`` command.
"""
