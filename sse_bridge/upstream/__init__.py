"""
Upstream Lifecycle

Discovery, startup and supervision of the upstream SSE service.
"""

from sse_bridge.upstream.supervisor import UpstreamProcess, UpstreamSupervisor

__all__ = ["UpstreamProcess", "UpstreamSupervisor"]
