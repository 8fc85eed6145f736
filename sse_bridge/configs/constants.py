"""
SSE Bridge Constants

Static configuration values that rarely change: default addresses, the
upstream launch command, JSON-RPC error codes, and timeout configuration.
"""

# --- Upstream Address ---

DEFAULT_SSE_URL = "http://localhost:12341/sse"

# Path segment of the event-subscription URL and its replacement for the
# command URL (http://host:port/sse -> http://host:port/mcp)
EVENT_PATH_SEGMENT = "/sse"
COMMAND_PATH_SEGMENT = "/mcp"

# Used when the configured URL carries no explicit port
DEFAULT_UPSTREAM_PORT = 12341

# --- Upstream Process ---

UPSTREAM_LABEL = "Serena"

# {host} and {port} are filled in from the configured address
DEFAULT_UPSTREAM_COMMAND = [
    "uvx",
    "--from",
    "git+https://github.com/oraios/serena",
    "serena-mcp-server",
    "--host",
    "{host}",
    "--port",
    "{port}",
    "--context",
    "ide",
    "--open-web-dashboard",
    "false",
]

READY_ATTEMPTS = 30
READY_INTERVAL = 1.0  # seconds between readiness probes

# --- Event Stream ---

RECONNECT_DELAY = 1.0  # seconds before reconnecting the event stream
DEFAULT_EVENT_TYPE = "message"
# Transport bookkeeping events, never forwarded to the host
IGNORED_EVENT_TYPES = frozenset({"message", "endpoint"})

# --- Request Forwarding ---

MAX_INFLIGHT_REQUESTS = 16
JSONRPC_INTERNAL_ERROR = -32603

# --- Timeout Configuration ---
# Centralized timeout values (in seconds)

TIMEOUTS = {
    "probe": 5,  # Liveness probe against the event URL
    "connect": 10,  # TCP connect for event stream and POSTs
    "request": 300,  # Command POST round trip (tool calls can be slow)
}


def get_timeout(key: str, default: int | float | None = None) -> int | float:
    """
    Get a timeout value by key.

    Args:
        key: Timeout key from TIMEOUTS dict
        default: Default value if key not found

    Returns:
        Timeout value in seconds
    """
    if default is None:
        default = TIMEOUTS.get("connect", 10)
    return TIMEOUTS.get(key, default)
