"""
SSE Bridge

Stdio JSON-RPC <-> HTTP/SSE protocol bridge with upstream process supervision.
"""

__version__ = "1.0.0"
