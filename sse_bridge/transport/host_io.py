"""
Host Stdio Channel

The host talks to the bridge over stdin/stdout. Several threads produce
output (event stream, request workers), so every record goes through one
HostWriter that writes a full line per call under a lock.
"""

import json
import sys
import threading
from typing import Any, BinaryIO, Callable, Iterator, Optional

from sse_bridge.configs.logging import get_logger

logger = get_logger("host")

READ_CHUNK_SIZE = 65536


def encode_message(message: Any) -> str:
    """Serialize a JSON value compactly, keeping non-ASCII text as-is."""
    return json.dumps(message, separators=(",", ":"), ensure_ascii=False)


class HostWriter:
    """Serialized, line-atomic writer for the host's output stream."""

    def __init__(
        self,
        stream: Optional[BinaryIO] = None,
        on_closed: Optional[Callable[[], None]] = None,
    ):
        self._stream = stream if stream is not None else sys.stdout.buffer
        self._on_closed = on_closed
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write_line(self, text: str) -> bool:
        """
        Write one record followed by a newline.

        Returns:
            False if the host's output is gone (the record is dropped)
        """
        data = (text + "\n").encode("utf-8")
        with self._lock:
            if self._closed:
                return False
            try:
                self._stream.write(data)
                self._stream.flush()
                return True
            except (OSError, ValueError) as e:
                self._closed = True
                logger.warning(f"Host output closed: {e}")

        if self._on_closed:
            self._on_closed()
        return False

    def write_message(self, message: Any) -> bool:
        """Write a JSON value as one compact line."""
        return self.write_line(encode_message(message))


def read_chunks(stream: Optional[BinaryIO] = None, size: int = READ_CHUNK_SIZE) -> Iterator[bytes]:
    """
    Yield chunks from the host's input as soon as they arrive.

    Uses read1() where available so a partial line is delivered without
    waiting for a full buffer. Stops at EOF.
    """
    if stream is None:
        stream = sys.stdin.buffer
    read = getattr(stream, "read1", stream.read)
    while True:
        chunk = read(size)
        if not chunk:
            return
        yield chunk
