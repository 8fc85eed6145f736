"""
SSE Bridge Exception Hierarchy

Centralized exception classes for structured error handling across the bridge.
All bridge-specific exceptions inherit from BridgeError.

Usage:
    from sse_bridge.exceptions import BridgeFatalError, UpstreamTransportError

    try:
        response = http_post(url, data=body)
    except UpstreamTransportError as e:
        logger.warning(f"POST failed: {e}")
"""


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(BridgeError):
    """Error in bridge configuration."""

    pass


class InvalidEndpointError(ConfigurationError):
    """Configured upstream address is not a usable http(s) URL."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Invalid upstream address {url!r}: {reason}", {"url": url})
        self.url = url


# =============================================================================
# Upstream Transport Errors (recoverable)
# =============================================================================


class UpstreamTransportError(BridgeError):
    """Base class for HTTP transport failures talking to the upstream."""

    pass


class UpstreamConnectionError(UpstreamTransportError):
    """Failed to connect to the upstream (refused, reset, DNS)."""

    pass


class UpstreamRequestTimeout(UpstreamTransportError):
    """Upstream did not answer within the request timeout."""

    pass


class StreamInterruptedError(UpstreamTransportError):
    """Event stream broke while reading the response body."""

    pass


# =============================================================================
# Fatal Errors (terminate the bridge)
# =============================================================================


class BridgeFatalError(BridgeError):
    """Unrecoverable condition; the bridge exits with exit_code."""

    def __init__(self, message: str, exit_code: int = 1, details: dict | None = None):
        super().__init__(message, details)
        self.exit_code = exit_code


class UpstreamSpawnError(BridgeFatalError):
    """Upstream executable could not be started."""

    def __init__(self, command: list[str], reason: str):
        super().__init__(
            f"Failed to start upstream: {reason}",
            exit_code=1,
            details={"command": " ".join(command)},
        )
        self.command = command


class UpstreamReadinessTimeout(BridgeFatalError):
    """Spawned upstream never became reachable."""

    def __init__(self, url: str, attempts: int):
        super().__init__(
            f"Timed out waiting for upstream at {url} after {attempts} attempts",
            exit_code=1,
        )
        self.attempts = attempts


class UpstreamExitedError(BridgeFatalError):
    """Owned upstream process exited while the bridge still needed it."""

    def __init__(self, returncode: int | None):
        super().__init__(
            f"Upstream exited unexpectedly with code {returncode}",
            exit_code=exit_code_for(returncode),
        )
        self.returncode = returncode


class UpstreamUnavailableError(BridgeFatalError):
    """Nothing is listening and auto-start is disabled."""

    pass


class StartupAborted(BridgeFatalError):
    """Session finished (e.g. termination signal) before startup completed."""

    pass


def exit_code_for(returncode: int | None) -> int:
    """Map a child return code to the bridge's own exit status.

    Zero, negative (killed by signal) and unknown codes become 1 so an
    unexpected upstream exit never looks like success.
    """
    if returncode is None or returncode <= 0:
        return 1
    return returncode
