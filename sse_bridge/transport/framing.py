"""
Framed-Stream Reader

Incremental segmentation of raw byte chunks into records. Two framings:

- LineFramer: newline-delimited text (host stdin, one JSON-RPC message per line)
- EventStreamFramer: Server-Sent Events, yielding (event, data) RelayFrames

Neither framer parses JSON; malformed payloads are the consumer's problem.
Output is independent of where chunk boundaries fall.
"""

from dataclasses import dataclass

from sse_bridge.configs.constants import DEFAULT_EVENT_TYPE


@dataclass(frozen=True)
class RelayFrame:
    """One decoded SSE event."""

    event: str
    data: str


class LineFramer:
    """Splits a byte stream into stripped, non-empty text lines."""

    def __init__(self, encoding: str = "utf-8"):
        self._encoding = encoding
        self._buffer = b""

    def feed(self, chunk: bytes) -> list[str]:
        """Consume a chunk, returning every line it completes."""
        self._buffer += chunk
        *complete, self._buffer = self._buffer.split(b"\n")
        return [line for line in map(self._decode, complete) if line]

    def flush(self) -> list[str]:
        """Return the unterminated remainder once the stream has ended."""
        remainder, self._buffer = self._buffer, b""
        line = self._decode(remainder)
        return [line] if line else []

    def _decode(self, raw: bytes) -> str:
        return raw.decode(self._encoding, errors="replace").strip()


class EventStreamFramer:
    """
    Parses an SSE body into RelayFrames.

    `event:` and `data:` lines set the pending event type and data; a blank
    line emits the pending pair when data is non-empty and resets both.
    State persists across chunks, so create one framer per connection.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._encoding = encoding
        self._buffer = b""
        self._event = DEFAULT_EVENT_TYPE
        self._data = ""

    def feed(self, chunk: bytes) -> list[RelayFrame]:
        """Consume a chunk, returning every frame it completes."""
        self._buffer += chunk
        *complete, self._buffer = self._buffer.split(b"\n")

        frames = []
        for raw in complete:
            line = raw.decode(self._encoding, errors="replace")
            if line.endswith("\r"):
                line = line[:-1]

            if line.startswith("event:"):
                self._event = line[len("event:"):].strip() or DEFAULT_EVENT_TYPE
            elif line.startswith("data:"):
                self._data = line[len("data:"):].strip()
            elif line == "":
                if self._data:
                    frames.append(RelayFrame(event=self._event, data=self._data))
                self._event = DEFAULT_EVENT_TYPE
                self._data = ""
            # comments (":"), id: and retry: lines carry nothing we relay

        return frames
