"""
Upstream Endpoint Addresses

The bridge is configured with one URL, the upstream's event-subscription
address. The command address is derived from it by swapping the path
segment, so both always share scheme, host and port.
"""

from dataclasses import dataclass
from urllib.parse import urlsplit, urlunsplit

from sse_bridge.configs.constants import (
    COMMAND_PATH_SEGMENT,
    DEFAULT_UPSTREAM_PORT,
    EVENT_PATH_SEGMENT,
)
from sse_bridge.exceptions import InvalidEndpointError


@dataclass(frozen=True)
class EndpointAddress:
    """Event and command URLs of one upstream."""

    event_url: str
    command_url: str
    scheme: str
    host: str
    port: int

    @classmethod
    def from_url(
        cls,
        url: str,
        event_segment: str = EVENT_PATH_SEGMENT,
        command_segment: str = COMMAND_PATH_SEGMENT,
    ) -> "EndpointAddress":
        """
        Build both addresses from the configured event URL.

        Only the first occurrence of event_segment inside the path is
        replaced; a URL without it yields identical event and command URLs.

        Raises:
            InvalidEndpointError: Not an http(s) URL with a hostname
        """
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https"):
            raise InvalidEndpointError(url, "scheme must be http or https")
        if not parts.hostname:
            raise InvalidEndpointError(url, "missing host")
        try:
            port = parts.port
        except ValueError as e:
            raise InvalidEndpointError(url, str(e)) from e

        command_path = parts.path.replace(event_segment, command_segment, 1)
        command_url = urlunsplit(
            (parts.scheme, parts.netloc, command_path, parts.query, parts.fragment)
        )

        return cls(
            event_url=url,
            command_url=command_url,
            scheme=parts.scheme,
            host=parts.hostname,
            port=port if port is not None else DEFAULT_UPSTREAM_PORT,
        )
