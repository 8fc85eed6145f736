"""
SSE Bridge Runtime Configuration

Configuration merging logic. Combines defaults, YAML config, environment
variables and the command line into one BridgeConfig.
"""

import os
import shlex
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Optional

from sse_bridge.configs.constants import (
    DEFAULT_SSE_URL,
    DEFAULT_UPSTREAM_COMMAND,
    MAX_INFLIGHT_REQUESTS,
    READY_ATTEMPTS,
    READY_INTERVAL,
    RECONNECT_DELAY,
    UPSTREAM_LABEL,
    get_timeout,
)
from sse_bridge.configs.logging import get_logger
from sse_bridge.configs.yaml_config import load_yaml_config

if TYPE_CHECKING:
    from sse_bridge.transport.endpoints import EndpointAddress

logger = get_logger("config")


@dataclass
class BridgeConfig:
    """Effective bridge settings."""

    sse_url: str = DEFAULT_SSE_URL
    auto_start: bool = True
    upstream_command: list[str] = field(default_factory=lambda: list(DEFAULT_UPSTREAM_COMMAND))
    upstream_label: str = UPSTREAM_LABEL
    ready_attempts: int = READY_ATTEMPTS
    ready_interval: float = READY_INTERVAL
    reconnect_delay: float = RECONNECT_DELAY
    probe_timeout: float = float(get_timeout("probe"))
    connect_timeout: float = float(get_timeout("connect"))
    request_timeout: float = float(get_timeout("request"))
    max_inflight: int = MAX_INFLIGHT_REQUESTS

    @property
    def endpoints(self) -> "EndpointAddress":
        """Event and command addresses derived from sse_url."""
        from sse_bridge.transport.endpoints import EndpointAddress

        return EndpointAddress.from_url(self.sse_url)

    def upstream_args(self) -> list[str]:
        """
        Upstream launch command with {host} and {port} filled in.

        Only those two tokens are replaced; any other braces in an argument
        (inline JSON, shell-style templates) are passed through as-is.
        """
        endpoints = self.endpoints
        return [
            arg.replace("{host}", endpoints.host).replace("{port}", str(endpoints.port))
            for arg in self.upstream_command
        ]


# Environment variable -> (field, parser)
_ENV_OVERRIDES = {
    "SSE_BRIDGE_URL": ("sse_url", str),
    "SSE_BRIDGE_UPSTREAM_COMMAND": ("upstream_command", shlex.split),
    "SSE_BRIDGE_REQUEST_TIMEOUT": ("request_timeout", float),
    "SSE_BRIDGE_RECONNECT_DELAY": ("reconnect_delay", float),
    "SSE_BRIDGE_READY_ATTEMPTS": ("ready_attempts", int),
}


# Lower bounds checked after coercion: field -> (minimum, inclusive)
_LOWER_BOUNDS = {
    "ready_attempts": (1, True),
    "max_inflight": (1, True),
    "probe_timeout": (0, False),
    "connect_timeout": (0, False),
    "request_timeout": (0, False),
    "ready_interval": (0, True),
    "reconnect_delay": (0, True),
}


def _validate(name: str, value):
    """Raise ValueError if value is out of range for name."""
    if name == "upstream_command" and not value:
        raise ValueError("upstream_command must not be empty")
    bound = _LOWER_BOUNDS.get(name)
    if bound is None:
        return value
    minimum, inclusive = bound
    if value < minimum or (value == minimum and not inclusive):
        raise ValueError(f"{name} must be {'at least' if inclusive else 'greater than'} {minimum}")
    return value


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("true", "1", "yes")


def _coerce(name: str, value):
    """Coerce a YAML value to the type of the BridgeConfig field."""
    default = getattr(BridgeConfig, name, None)
    if name == "upstream_command":
        if isinstance(value, str):
            return shlex.split(value)
        return [str(arg) for arg in value]
    if isinstance(default, bool):
        return _parse_bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


def load_config(sse_url: Optional[str] = None, auto_start: Optional[bool] = None) -> BridgeConfig:
    """
    Get full configuration merged from defaults, YAML, environment and CLI.

    Priority (highest wins):
    1. Explicit arguments (command line)
    2. Environment variables
    3. YAML config file (bridge section)
    4. BridgeConfig defaults

    Invalid values are logged and skipped, keeping the lower-priority value.

    Returns:
        Merged BridgeConfig

    Raises:
        InvalidEndpointError: Resulting sse_url is not an http(s) URL
    """
    config = BridgeConfig()
    known = {f.name for f in fields(BridgeConfig)}

    # Merge bridge section from YAML
    yaml_section = load_yaml_config().get("bridge") or {}
    if isinstance(yaml_section, dict):
        for key, value in yaml_section.items():
            if key not in known or value is None:
                continue
            try:
                setattr(config, key, _validate(key, _coerce(key, value)))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid config value bridge.{key}={value!r}")

    # Environment overrides
    for env_name, (attr, parser) in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if not raw:
            continue
        try:
            setattr(config, attr, _validate(attr, parser(raw)))
        except ValueError:
            logger.warning(f"Ignoring invalid {env_name}={raw!r}")

    if os.environ.get("SSE_BRIDGE_NO_SPAWN"):
        config.auto_start = not _parse_bool(os.environ["SSE_BRIDGE_NO_SPAWN"])

    # Command line overrides
    if sse_url:
        config.sse_url = sse_url
    if auto_start is not None:
        config.auto_start = auto_start

    # Fail fast on an unusable address
    from sse_bridge.transport.endpoints import EndpointAddress

    EndpointAddress.from_url(config.sse_url)
    return config
