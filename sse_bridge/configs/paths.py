"""
SSE Bridge Data Paths

Location of the bridge's data directory (config file, optional log file).
"""

import os
from pathlib import Path

DEFAULT_DATA_PATH = Path.home() / ".sse-bridge"


def get_data_path() -> Path:
    """Get the bridge data directory path.

    Honors SSE_BRIDGE_DATA_PATH, falling back to ~/.sse-bridge.

    Returns:
        Path to the data directory
    """
    data_path = os.environ.get("SSE_BRIDGE_DATA_PATH")
    if data_path:
        return Path(data_path).expanduser()
    return DEFAULT_DATA_PATH
