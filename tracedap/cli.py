"""
Command line entry point for the tracedap debug adapter.
"""

from __future__ import annotations

import argparse
import logging
import sys

from tracedap.adapter.server import EXIT_FAILURE
from tracedap.adapter.server import DebugAdapterServer
from tracedap.adapter.transport import open_channel
from tracedap.config import DEFAULT_MAX_FRAMES
from tracedap.config import DEFAULT_MAX_VARIABLES
from tracedap.config import TracedapConfig
from tracedap.errors import ConfigurationError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
TRACE_FORMAT = "%(asctime)s %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tracedap", description="Debug adapter for Python programs"
    )
    parser.add_argument(
        "--tcp",
        type=int,
        metavar="PORT",
        help="Listen for one client on this TCP port (default: stdio)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to with --tcp (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--read-timeout",
        type=float,
        help="Seconds to wait for the rest of a frame once its header arrived (TCP only)",
    )
    parser.add_argument(
        "--trace-log",
        type=str,
        help="Write every inbound and outbound message to this file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--max-frames",
        type=int,
        default=DEFAULT_MAX_FRAMES,
        help=f"Most frames reported in a stack trace (default: {DEFAULT_MAX_FRAMES})",
    )
    parser.add_argument(
        "--max-variables",
        type=int,
        default=DEFAULT_MAX_VARIABLES,
        help=f"Most names reported per scope (default: {DEFAULT_MAX_VARIABLES})",
    )
    return parser


def configure_logging(config: TracedapConfig) -> None:
    """Console logging on stderr, plus the message trace file when requested.

    Raises:
        OSError: The trace log cannot be opened.
    """
    # stdout may be the protocol channel
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    trace = logging.getLogger("tracedap.trace")
    if config.trace_log:
        handler = logging.FileHandler(config.trace_log, encoding="utf-8")
        handler.setFormatter(logging.Formatter(TRACE_FORMAT))
        trace.addHandler(handler)
        trace.setLevel(logging.INFO)
    # Trace lines go to the trace file only
    trace.propagate = False


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = TracedapConfig.from_args(args)
    try:
        config.validate()
        configure_logging(config)
    except ConfigurationError as exc:
        print(f"tracedap: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as exc:
        print(f"tracedap: cannot open trace log: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        with open_channel(config.transport) as channel:
            return DebugAdapterServer(channel, config).serve()
    except OSError as exc:
        logger.error("Transport failure: %s", exc)
        return EXIT_FAILURE


def main() -> None:
    sys.exit(run())
