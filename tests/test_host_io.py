"""
Tests for the host stdio channel.
"""

import io
import threading
from unittest.mock import MagicMock

from sse_bridge.transport.host_io import HostWriter, encode_message, read_chunks


class BrokenPipe(io.BytesIO):
    def write(self, data):
        raise BrokenPipeError("host went away")


class TestHostWriter:
    """Serialized, line-atomic output."""

    def test_write_message_is_one_compact_line(self, writer, host_output):
        assert writer.write_message({"id": 1, "result": {"a": [1, 2]}}) is True
        assert host_output.getvalue() == b'{"id":1,"result":{"a":[1,2]}}\n'

    def test_concurrent_writers_never_interleave(self, writer, host_output):
        """Lines from many threads arrive whole."""
        payload = "x" * 4096

        def produce(n):
            for i in range(50):
                writer.write_message({"writer": n, "seq": i, "pad": payload})

        threads = [threading.Thread(target=produce, args=(n,)) for n in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        messages = host_output.messages()
        assert len(messages) == 300
        for n in range(6):
            assert [m["seq"] for m in messages if m["writer"] == n] == list(range(50))

    def test_closed_output_reported_once(self):
        on_closed = MagicMock()
        writer = HostWriter(BrokenPipe(), on_closed=on_closed)

        assert writer.write_line("{}") is False
        assert writer.write_line("{}") is False

        assert writer.closed is True
        on_closed.assert_called_once_with()

    def test_write_to_closed_file(self):
        stream = io.BytesIO()
        stream.close()
        writer = HostWriter(stream)
        assert writer.write_message({"id": 1}) is False
        assert writer.closed is True


class TestEncodeMessage:
    def test_compact_and_unicode(self):
        assert encode_message({"a": "日本", "b": None}) == '{"a":"日本","b":null}'


class TestReadChunks:
    def test_reads_until_eof(self):
        stream = io.BufferedReader(io.BytesIO(b"abc\ndef"))
        assert b"".join(read_chunks(stream, size=2)) == b"abc\ndef"

    def test_stream_without_read1(self):
        class PlainStream:
            def __init__(self):
                self._parts = [b"one\n", b"two\n"]

            def read(self, size=-1):
                return self._parts.pop(0) if self._parts else b""

        assert list(read_chunks(PlainStream())) == [b"one\n", b"two\n"]

    def test_empty_input(self):
        assert list(read_chunks(io.BytesIO(b""))) == []
