"""
Transport Layer

Byte-stream framing, upstream address derivation and the host stdio channel.
"""

from sse_bridge.transport.endpoints import EndpointAddress
from sse_bridge.transport.framing import EventStreamFramer, LineFramer, RelayFrame
from sse_bridge.transport.host_io import HostWriter, encode_message, read_chunks

__all__ = [
    "EndpointAddress",
    "EventStreamFramer",
    "HostWriter",
    "LineFramer",
    "RelayFrame",
    "encode_message",
    "read_chunks",
]
