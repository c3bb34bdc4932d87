"""Command-line entry point for UQ stress runs.

Usage:
    uq-stress -h host -p port -c concurrency -n count -m push -t topic -l line

``-h`` selects the host, so help is only available as ``--help``. Flags that
are not given fall back to ``UQ_*`` environment variables and then to the
built-in defaults.
"""

import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from uqlib.common.config import (
    SUPPORTED_MODES,
    BackendType,
    ConfigurationError,
    get_config,
    validate_mode,
)
from uqlib.common.logging import configure_logging, run_log_path

from .dispatcher import DispatchTimeoutError
from .runner import StressTest


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser (defaults live on ``RunConfig``)."""
    parser = argparse.ArgumentParser(
        prog="uq-stress",
        description="Stress test a UQ queue over the memcache protocol",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    parser.add_argument("-h", dest="host", help="hostname (default: 127.0.0.1)")
    parser.add_argument("-p", dest="port", type=int, help="port (default: 11211)")
    parser.add_argument("-c", dest="concurrency", type=int, help="concurrency level (default: 10)")
    parser.add_argument("-n", dest="count", type=int, help="test count (default: 10000)")
    parser.add_argument("-m", dest="mode", help=f"test method, one of {', '.join(SUPPORTED_MODES)} (default: push)")
    parser.add_argument("-t", dest="topic", help="topic to test (default: StressTestTool)")
    parser.add_argument("-l", dest="line", help="line to test (default: Line)")

    parser.add_argument(
        "--backend",
        choices=[backend.value for backend in BackendType],
        help="backend client implementation (default: memcache)",
    )
    parser.add_argument("--timeout", type=float, help="per-call reply timeout in seconds (default: none)")
    parser.add_argument("--connect-timeout", type=float, help="connect timeout in seconds (default: none)")
    parser.add_argument("--run-timeout", type=float, help="deadline for all workers to finish (default: none)")
    parser.add_argument("--log-dir", help="directory for the run log (default: .)")
    parser.add_argument("--log-level", help="log level (default: INFO)")
    parser.add_argument("--log-format", choices=["console", "json"], help="log line format (default: console)")
    parser.add_argument("--metrics-file", help="write Prometheus metrics to this file after the run")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run a stress test; returns the process exit code."""
    args = build_parser().parse_args(argv)

    if args.mode is not None:
        try:
            validate_mode(args.mode)
        except ConfigurationError:
            print("test method not supported!")
            return 1

    try:
        config = get_config(**vars(args))
    except ValidationError as e:
        if any(error["loc"] and error["loc"][0] == "mode" for error in e.errors()):
            print("test method not supported!")
        else:
            print(f"invalid configuration: {e}", file=sys.stderr)
        return 1

    log_file = run_log_path(config.log_dir, config.mode.value, config.concurrency, config.count)
    try:
        configure_logging(
            "uq-stress",
            log_level=config.log_level,
            log_format=config.log_format,
            log_file=log_file,
            mode=config.mode.value,
        )
    except OSError as e:
        print(f"{e}", file=sys.stderr)
        return 1

    try:
        StressTest(config).run()
    except DispatchTimeoutError as e:
        print(f"StressTest aborted: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
