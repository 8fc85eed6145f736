"""
Tests for the HTTP client wrappers.
"""

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import MagicMock, patch

import pytest
import requests
import urllib3

from sse_bridge.exceptions import (
    StreamInterruptedError,
    UpstreamConnectionError,
    UpstreamRequestTimeout,
    UpstreamTransportError,
)
from sse_bridge.utils.http_client import http_post, http_probe, http_stream, iter_chunks

URL = "http://127.0.0.1:12341/sse"


class TestHttpProbe:
    """Any HTTP answer means the upstream is alive."""

    @pytest.mark.parametrize("status_code", [200, 404, 500])
    def test_any_response_is_alive(self, status_code):
        response = MagicMock(status_code=status_code)
        with patch("requests.get", return_value=response) as get:
            assert http_probe(URL, timeout=5) is True

        get.assert_called_once_with(URL, stream=True, timeout=5)
        response.close.assert_called_once_with()

    @pytest.mark.parametrize(
        "error",
        [
            requests.exceptions.ConnectionError("refused"),
            requests.exceptions.ConnectTimeout("slow"),
            requests.exceptions.InvalidURL("bad"),
        ],
    )
    def test_transport_failure_is_not_alive(self, error):
        with patch("requests.get", side_effect=error):
            assert http_probe(URL, timeout=5) is False


class TestHttpPost:
    """Error translation for command POSTs."""

    def test_returns_response_without_status_check(self):
        response = MagicMock(status_code=500)
        with patch("requests.post", return_value=response) as post:
            assert http_post(URL, data=b"{}", headers={"X": "1"}, timeout=(1, 2)) is response

        post.assert_called_once_with(URL, data=b"{}", headers={"X": "1"}, timeout=(1, 2))

    @pytest.mark.parametrize(
        "error, expected",
        [
            (requests.exceptions.ConnectionError("refused"), UpstreamConnectionError),
            (requests.exceptions.ReadTimeout("slow"), UpstreamRequestTimeout),
            (requests.exceptions.ConnectTimeout("slow"), UpstreamRequestTimeout),
            (requests.exceptions.TooManyRedirects("loop"), UpstreamTransportError),
        ],
    )
    def test_errors_translated(self, error, expected):
        with patch("requests.post", side_effect=error):
            with pytest.raises(expected) as exc_info:
                http_post(URL, data=b"{}")

        assert URL in str(exc_info.value)
        assert exc_info.value.__cause__ is error


class TestHttpStream:
    """Streaming GET lifecycle."""

    def test_response_closed_after_block(self):
        response = MagicMock(status_code=200)
        with patch("requests.get", return_value=response) as get:
            with http_stream(URL, headers={"Accept": "text/event-stream"}, timeout=(10, None)) as opened:
                assert opened is response
                response.close.assert_not_called()

        response.close.assert_called_once_with()
        assert get.call_args.kwargs["stream"] is True

    def test_response_closed_on_error_in_block(self):
        response = MagicMock(status_code=200)
        with patch("requests.get", return_value=response):
            with pytest.raises(RuntimeError):
                with http_stream(URL):
                    raise RuntimeError("boom")

        response.close.assert_called_once_with()

    def test_connect_failure_translated(self):
        with patch("requests.get", side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(UpstreamConnectionError):
                with http_stream(URL):
                    pass


class TestIterChunks:
    """Reading streaming bodies."""

    def test_reads_until_eof(self):
        response = MagicMock()
        response.raw.read1.side_effect = [b"a", b"b", b""]
        assert list(iter_chunks(response, size=16)) == [b"a", b"b"]
        response.raw.read1.assert_called_with(16, decode_content=True)

    @pytest.mark.parametrize(
        "error",
        [
            urllib3.exceptions.ProtocolError("reset"),
            requests.exceptions.ChunkedEncodingError("reset"),
            ConnectionResetError("reset"),
        ],
    )
    def test_midstream_failure(self, error):
        response = MagicMock()
        response.raw.read1.side_effect = [b"event: x\n", error]

        received = []
        with pytest.raises(StreamInterruptedError):
            for chunk in iter_chunks(response):
                received.append(chunk)
        assert received == [b"event: x\n"]


# =============================================================================
# Live Event Stream
# =============================================================================


class HeldOpenEventStream(BaseHTTPRequestHandler):
    """HTTP/1.0 event stream: no Content-Length, no chunking, ends on close."""

    release: threading.Event

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "text/event-stream")
        self.end_headers()
        self.wfile.write(b'event: notification\ndata: {"id":1}\n\n')
        self.wfile.flush()
        self.release.wait(timeout=10)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def held_open_server():
    release = threading.Event()
    handler = type("Handler", (HeldOpenEventStream,), {"release": release})
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    server.daemon_threads = True
    threading.Thread(target=server.serve_forever, daemon=True).start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}/sse", release
    finally:
        release.set()
        server.shutdown()
        server.server_close()


class TestLiveEventStream:
    """Data is delivered while the connection is still open."""

    def test_event_arrives_before_connection_closes(self, held_open_server):
        url, release = held_open_server
        received = []

        def read_first_chunk():
            with http_stream(url, timeout=(5, None)) as response:
                received.append(next(iter_chunks(response)))

        reader = threading.Thread(target=read_first_chunk, daemon=True)
        reader.start()
        reader.join(timeout=2)
        while_open = list(received)
        release.set()
        reader.join(timeout=5)

        assert while_open
        assert while_open[0].startswith(b"event: notification")
