"""
SSE Bridge Configuration Module

Re-exports commonly used functions for cleaner imports across the codebase.
"""

# Logging (most commonly used)
from sse_bridge.configs.logging import get_logger, setup_logging

# Paths
from sse_bridge.configs.paths import get_data_path

# Constants
from sse_bridge.configs.constants import (
    DEFAULT_SSE_URL,
    JSONRPC_INTERNAL_ERROR,
    TIMEOUTS,
    get_timeout,
)

# YAML config
from sse_bridge.configs.yaml_config import (
    DEFAULT_CONFIG_YAML,
    create_default_config,
    get_config_path,
    load_yaml_config,
)

# Runtime
from sse_bridge.configs.runtime import BridgeConfig, load_config

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Paths
    "get_data_path",
    # Constants
    "DEFAULT_SSE_URL",
    "JSONRPC_INTERNAL_ERROR",
    "TIMEOUTS",
    "get_timeout",
    # YAML config
    "DEFAULT_CONFIG_YAML",
    "create_default_config",
    "get_config_path",
    "load_yaml_config",
    # Runtime
    "BridgeConfig",
    "load_config",
]
