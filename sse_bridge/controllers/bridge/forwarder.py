"""
Request Forwarder

Reads JSON-RPC messages from the host, POSTs each one to the upstream's
command endpoint and relays the response body back. Requests are independent
and each runs on its own daemon thread, so replies may reach the host out of
order; the host correlates them by id. A bounded semaphore caps how many are
in flight. Daemon threads are never joined at interpreter exit, so a
shutdown does not wait for a slow POST.

A transport failure still produces exactly one reply: a JSON-RPC error
carrying the request's id. Lines that are not JSON get no reply at all,
since there is no id to answer to.
"""

import itertools
import json
import threading
from typing import Any, BinaryIO, Optional

from sse_bridge.configs.constants import JSONRPC_INTERNAL_ERROR
from sse_bridge.configs.logging import get_logger
from sse_bridge.configs.runtime import BridgeConfig
from sse_bridge.exceptions import UpstreamTransportError
from sse_bridge.session import BridgeSession
from sse_bridge.transport.framing import LineFramer
from sse_bridge.transport.host_io import HostWriter, encode_message, read_chunks
from sse_bridge.utils.http_client import http_post

logger = get_logger("forwarder")

# How often a reader waiting for a free slot rechecks for shutdown
SLOT_WAIT = 0.5


def error_response(request: Any, code: int, message: str) -> dict:
    """Build a JSON-RPC error envelope answering request."""
    request_id = request.get("id") if isinstance(request, dict) else None
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {"code": code, "message": message},
    }


class RequestForwarder:
    """Relays host requests to the upstream command endpoint."""

    def __init__(self, config: BridgeConfig, session: BridgeSession, writer: HostWriter):
        self._config = config
        self._session = session
        self._writer = writer
        self._url = config.endpoints.command_url
        self._slots = threading.BoundedSemaphore(config.max_inflight)
        self._inflight: set[threading.Thread] = set()
        self._inflight_lock = threading.Lock()
        self._abandoned = threading.Event()
        self._counter = itertools.count(1)
        self._thread: Optional[threading.Thread] = None

    def start(self, stream: Optional[BinaryIO] = None) -> None:
        """Start reading host input in a daemon thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self.pump, args=(stream,), name="host-reader", daemon=True)
        self._thread.start()

    def pump(self, stream: Optional[BinaryIO] = None) -> None:
        """
        Read host input until EOF, dispatching every complete line.

        At EOF the in-flight requests are allowed to finish, then the session
        ends with exit code 0.
        """
        framer = LineFramer()
        try:
            for chunk in read_chunks(stream):
                for line in framer.feed(chunk):
                    self.handle_line(line)
                if self._session.finished:
                    return
            for line in framer.flush():
                self.handle_line(line)
        except (OSError, ValueError) as e:
            logger.warning(f"Host input failed: {e}")

        self.drain()
        self._session.finish(0, "host closed input")

    def handle_line(self, line: str) -> Optional[threading.Thread]:
        """
        Parse one host line and start its POST.

        Blocks while max_inflight requests are already running.

        Returns:
            Thread running the forward, or None if the line was not JSON or
            the forwarder has been abandoned
        """
        try:
            request = json.loads(line)
        except ValueError as e:
            logger.error(f"Failed to parse host message: {e}")
            return None

        if not self._acquire_slot():
            logger.debug("Dropping host message received during shutdown")
            return None

        thread = threading.Thread(
            target=self._run,
            args=(request,),
            name=f"forward-{next(self._counter)}",
            daemon=True,
        )
        with self._inflight_lock:
            self._inflight.add(thread)
        thread.start()
        return thread

    def _acquire_slot(self) -> bool:
        while not self._slots.acquire(timeout=SLOT_WAIT):
            if self._abandoned.is_set():
                return False
        if self._abandoned.is_set():
            self._slots.release()
            return False
        return True

    def _run(self, request: Any) -> None:
        try:
            self.forward(request)
        finally:
            with self._inflight_lock:
                self._inflight.discard(threading.current_thread())
            self._slots.release()

    def forward(self, request: Any) -> None:
        """POST request upstream and write the reply (or a synthesized error) to the host."""
        body = encode_message(request).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
        }
        timeout = (self._config.connect_timeout, self._config.request_timeout)

        try:
            response = http_post(self._url, data=body, headers=headers, timeout=timeout)
        except UpstreamTransportError as e:
            logger.warning(f"Command POST failed: {e}")
            self._writer.write_message(error_response(request, JSONRPC_INTERNAL_ERROR, f"Bridge error: {e}"))
            return

        text = response.content.decode("utf-8", errors="replace").strip()
        if text:
            self._writer.write_line(text)
        elif response.status_code >= 400:
            logger.warning(f"Command POST returned {response.status_code} with empty body")

    @property
    def inflight(self) -> int:
        with self._inflight_lock:
            return len(self._inflight)

    def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for the requests currently in flight to finish."""
        with self._inflight_lock:
            pending = list(self._inflight)
        for thread in pending:
            thread.join(timeout)

    def abandon(self) -> None:
        """Stop accepting work; running requests are left behind on their daemon threads."""
        self._abandoned.set()
