"""
Standardized HTTP Client Utilities

Provides a consistent interface for talking to the upstream over HTTP.
Uses `requests` with standardized error handling: every transport failure
surfaces as an UpstreamTransportError subclass.

Usage:
    from sse_bridge.utils.http_client import http_post, http_stream, iter_chunks

    # Command POST
    response = http_post(command_url, data=body, headers=headers, timeout=300)

    # Event stream
    with http_stream(event_url, headers={"Accept": "text/event-stream"}) as response:
        for chunk in iter_chunks(response):
            ...
"""

from contextlib import contextmanager
from typing import Iterator, Optional, Union

import requests
import urllib3

from sse_bridge.configs.constants import get_timeout
from sse_bridge.exceptions import (
    StreamInterruptedError,
    UpstreamConnectionError,
    UpstreamRequestTimeout,
    UpstreamTransportError,
)

# Default timeout for HTTP requests (seconds)
DEFAULT_TIMEOUT = get_timeout("connect", 10)

# Upper bound per read from a streaming body; a read returns whatever has arrived
STREAM_CHUNK_SIZE = 65536

Timeout = Union[float, tuple[float, Optional[float]]]


def _translate(e: requests.RequestException, url: str) -> UpstreamTransportError:
    """Map a requests exception to the bridge's transport error types."""
    if isinstance(e, requests.exceptions.Timeout):
        return UpstreamRequestTimeout(f"Request timed out: {url}: {e}")
    if isinstance(e, requests.exceptions.ConnectionError):
        return UpstreamConnectionError(f"Connection failed: {url}: {e}")
    return UpstreamTransportError(f"Request failed: {url}: {e}")


def http_probe(url: str, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """
    Check whether anything answers HTTP at url.

    Any response counts, including 4xx/5xx: a wrong path on a live server is
    still a live server. Only transport failures mean nothing is listening.
    The body is never read, so probing an event stream returns immediately.

    Args:
        url: URL to probe
        timeout: Connect/read timeout in seconds

    Returns:
        True if the server responded
    """
    try:
        response = requests.get(url, stream=True, timeout=timeout)
    except requests.RequestException:
        return False
    response.close()
    return True


def http_post(
    url: str,
    data: bytes,
    headers: dict[str, str] | None = None,
    timeout: Timeout = DEFAULT_TIMEOUT,
) -> requests.Response:
    """
    Make a POST request with standardized error handling.

    Status codes are not checked; the caller decides what a 4xx/5xx means.

    Args:
        url: Request URL
        data: Raw body
        headers: Optional headers dict
        timeout: Request timeout in seconds, or (connect, read) tuple

    Returns:
        requests.Response object with the full body loaded

    Raises:
        UpstreamConnectionError: Connection failed
        UpstreamRequestTimeout: Request timed out
        UpstreamTransportError: Any other transport failure
    """
    try:
        return requests.post(url, data=data, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise _translate(e, url) from e


@contextmanager
def http_stream(
    url: str,
    headers: dict[str, str] | None = None,
    timeout: Timeout = DEFAULT_TIMEOUT,
) -> Iterator[requests.Response]:
    """
    Open a streaming GET and close it when the block exits.

    Raises:
        UpstreamConnectionError: Connection failed
        UpstreamRequestTimeout: No response headers within the timeout
        UpstreamTransportError: Any other transport failure
    """
    try:
        response = requests.get(url, headers=headers, stream=True, timeout=timeout)
    except requests.RequestException as e:
        raise _translate(e, url) from e

    try:
        yield response
    finally:
        response.close()


def iter_chunks(response: requests.Response, size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    """
    Yield body chunks of a streaming response as they arrive.

    Reads with read1() on the underlying urllib3 response. iter_content()
    waits for a full buffer, which never comes on an event stream that is
    neither chunked nor length-delimited (one ended by closing the
    connection).

    Raises:
        StreamInterruptedError: Connection dropped mid-body
    """
    read = response.raw.read1
    try:
        while True:
            chunk = read(size, decode_content=True)
            if not chunk:
                return
            yield chunk
    except (requests.RequestException, urllib3.exceptions.HTTPError, OSError) as e:
        raise StreamInterruptedError(f"Event stream interrupted: {e}") from e
