"""
MCP Stdio-to-SSE Bridge

Reads JSON-RPC messages from stdin, forwards them to the upstream's HTTP
command endpoint, relays the upstream's SSE event stream to stdout, and
starts the upstream first when nothing is listening.

This allows several IDE sessions to share a single upstream server.
"""

import argparse
import signal
import sys
import threading
from typing import BinaryIO, Optional

from sse_bridge.configs.constants import DEFAULT_SSE_URL
from sse_bridge.configs.logging import get_logger, setup_logging
from sse_bridge.configs.runtime import BridgeConfig, load_config
from sse_bridge.controllers.bridge.events import EventStreamClient
from sse_bridge.controllers.bridge.forwarder import RequestForwarder
from sse_bridge.exceptions import BridgeFatalError, ConfigurationError, StartupAborted
from sse_bridge.session import BridgeSession
from sse_bridge.transport.host_io import HostWriter
from sse_bridge.upstream.supervisor import UpstreamSupervisor

logger = get_logger("bridge")

CONFIG_ERROR_EXIT = 2


def install_signal_handlers(session: BridgeSession) -> dict:
    """
    Route SIGINT/SIGTERM to a graceful session finish.

    Only possible from the main thread; elsewhere nothing is installed.

    Returns:
        Previous handlers, for restore_signal_handlers()
    """
    if threading.current_thread() is not threading.main_thread():
        return {}

    def _handle(signum, _frame):
        session.finish(0, f"received {signal.Signals(signum).name}")

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, _handle)
    return previous


def restore_signal_handlers(previous: dict) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def run_bridge(
    config: BridgeConfig,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
) -> int:
    """
    Run the bridge until shutdown.

    Args:
        config: Effective configuration
        stdin: Host input (defaults to sys.stdin.buffer)
        stdout: Host output (defaults to sys.stdout.buffer)

    Returns:
        Process exit code
    """
    endpoints = config.endpoints
    logger.info(f"MCP bridge starting, events: {endpoints.event_url}, commands: {endpoints.command_url}")

    session = BridgeSession()
    writer = HostWriter(stdout, on_closed=lambda: session.finish(0, "host closed output"))
    previous_handlers = install_signal_handlers(session)

    try:
        try:
            UpstreamSupervisor(config, session).ensure_upstream()
        except StartupAborted as e:
            logger.info(str(e))
            return e.exit_code
        except BridgeFatalError as e:
            logger.error(str(e))
            return e.exit_code

        EventStreamClient(config, session, writer).start()
        forwarder = RequestForwarder(config, session, writer)
        forwarder.start(stdin)

        exit_code = session.wait()
        # In-flight POSTs are abandoned, not drained
        forwarder.abandon()
        return exit_code
    finally:
        session.close()
        restore_signal_handlers(previous_handlers)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sse-bridge",
        description="Bridge stdio JSON-RPC to an HTTP/SSE MCP server",
    )
    parser.add_argument(
        "sse_url",
        nargs="?",
        default=None,
        help=f"Event-subscription URL of the upstream (default: {DEFAULT_SSE_URL})",
    )
    parser.add_argument(
        "--no-spawn",
        action="store_true",
        help="Fail instead of starting the upstream when nothing is listening",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Command-line entry point for the bridge."""
    args = build_parser().parse_args(argv)
    setup_logging(debug=True if args.debug else None)

    try:
        config = load_config(sse_url=args.sse_url, auto_start=False if args.no_spawn else None)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(CONFIG_ERROR_EXIT)

    sys.exit(run_bridge(config))
