"""
MCP Stdio-to-SSE Bridge

Reads MCP JSON-RPC messages from stdin, forwards them to the upstream HTTP
command endpoint, and relays the upstream's event stream to stdout. This
allows multiple IDE sessions to share a single upstream server.
"""

from sse_bridge.controllers.bridge.bridge import main, run_bridge

__all__ = ["main", "run_bridge"]
