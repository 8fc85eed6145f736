"""
Event Stream Client

Keeps one subscription to the upstream's SSE endpoint open for the life of
the bridge and relays server-to-client JSON-RPC messages to the host.

States: connecting -> streaming -> (closed | errored) -> connecting again
after a fixed delay. There is no retry limit; only the end of the session
stops the loop, since the upstream may just be restarting.
"""

import json
import threading
from typing import Optional

from sse_bridge.configs.constants import IGNORED_EVENT_TYPES
from sse_bridge.configs.logging import get_logger
from sse_bridge.configs.runtime import BridgeConfig
from sse_bridge.exceptions import UpstreamTransportError
from sse_bridge.session import BridgeSession
from sse_bridge.transport.framing import EventStreamFramer, RelayFrame
from sse_bridge.transport.host_io import HostWriter, encode_message
from sse_bridge.utils.http_client import http_stream, iter_chunks

logger = get_logger("events")

EVENT_STREAM_HEADERS = {
    "Accept": "text/event-stream",
    "Cache-Control": "no-cache",
}


class EventStreamClient:
    """Relays the upstream's event stream to the host."""

    def __init__(self, config: BridgeConfig, session: BridgeSession, writer: HostWriter):
        self._config = config
        self._session = session
        self._writer = writer
        self._url = config.endpoints.event_url
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the subscription loop in a daemon thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self.run, name="event-stream", daemon=True)
        self._thread.start()

    def run(self) -> None:
        """Connect, stream, and reconnect until the session finishes."""
        while not self._session.finished:
            self._session.stream_connects += 1
            try:
                if self._stream_once():
                    logger.warning("SSE connection closed, reconnecting...")
            except UpstreamTransportError as e:
                self._session.stream_failures += 1
                logger.warning(f"SSE connection error: {e}")

            if self._session.sleep(self._config.reconnect_delay):
                break

        logger.debug("Event stream client stopped")

    def _stream_once(self) -> bool:
        """
        Run one connection until the upstream closes it.

        Returns:
            True if a stream was established (and then ended), False if the
            upstream answered with a non-200 status
        """
        timeout = (self._config.connect_timeout, None)
        with http_stream(self._url, headers=EVENT_STREAM_HEADERS, timeout=timeout) as response:
            if response.status_code != 200:
                self._session.stream_failures += 1
                logger.error(f"SSE connection failed: {response.status_code}")
                return False

            if self._session.stream_failures:
                logger.info(f"SSE connection restored after {self._session.stream_failures} failed attempts")
            self._session.stream_failures = 0

            framer = EventStreamFramer()
            for chunk in iter_chunks(response):
                for frame in framer.feed(chunk):
                    self.handle_frame(frame)
                if self._session.finished:
                    break
        return True

    def handle_frame(self, frame: RelayFrame) -> bool:
        """
        Forward one event to the host if it carries a JSON payload.

        Bookkeeping events and non-JSON data (keepalives) are dropped silently.

        Returns:
            True if a message was written to the host
        """
        if frame.event in IGNORED_EVENT_TYPES:
            return False

        try:
            message = json.loads(frame.data)
        except ValueError:
            return False

        return self._writer.write_message(message)
