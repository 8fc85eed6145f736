"""
SSE Bridge YAML Configuration

Loading and defaults for ~/.sse-bridge/config.yaml.
"""

from pathlib import Path

import yaml

from sse_bridge.configs.logging import get_logger
from sse_bridge.configs.paths import get_data_path

logger = get_logger("config")

# --- Default Config Template ---

DEFAULT_CONFIG_YAML = """\
# SSE Bridge Configuration
# Edit this file to customize bridge behavior.
# Environment variables (SSE_BRIDGE_*) and the command line override it.

bridge:
  # Event-subscription address of the upstream. The command address is
  # derived by replacing /sse with /mcp in the path.
  sse_url: "http://localhost:12341/sse"

  # Start the upstream when nothing answers at sse_url
  auto_start: true

  # Command used to start the upstream ({host} and {port} are substituted)
  # upstream_command:
  #   - uvx
  #   - --from
  #   - git+https://github.com/oraios/serena
  #   - serena-mcp-server
  #   - --host
  #   - "{host}"
  #   - --port
  #   - "{port}"

  # Label prefixed to upstream output lines in the log
  upstream_label: "Serena"

  # Readiness polling after starting the upstream
  ready_attempts: 30
  ready_interval: 1.0

  # Seconds to wait before reconnecting the event stream
  reconnect_delay: 1.0

  # Timeouts in seconds
  probe_timeout: 5
  connect_timeout: 10
  request_timeout: 300

  # Concurrent command POSTs
  max_inflight: 16
"""


def get_config_path() -> Path:
    """Get the path to config.yaml."""
    return get_data_path() / "config.yaml"


def load_yaml_config() -> dict:
    """
    Load configuration from ~/.sse-bridge/config.yaml.

    Returns:
        Configuration dictionary (empty if file doesn't exist or is invalid)
    """
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        content = yaml.safe_load(config_path.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config {config_path}: {e}")
        return {}

    if not isinstance(content, dict):
        return {}
    return content


def create_default_config() -> bool:
    """
    Create default config.yaml if it doesn't exist.

    Returns:
        True if file was created, False if it already exists
    """
    config_path = get_config_path()
    if config_path.exists():
        return False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_YAML)
    return True
