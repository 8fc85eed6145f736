"""
SSE Bridge Logging Configuration

Configures logging based on environment variables:
- SSE_BRIDGE_DEBUG: Enable debug logging (default: false)
- SSE_BRIDGE_LOG_FILE: Optional log file path, in addition to stderr

Stdout belongs to the host's JSON-RPC stream, so log output goes to stderr only.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional


def setup_logging(
    debug: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for the bridge.

    Args:
        debug: Enable debug level. Defaults to SSE_BRIDGE_DEBUG env var.
        log_file: Log file path. Defaults to SSE_BRIDGE_LOG_FILE env var;
                  no file logging when neither is set.

    Returns:
        Root logger for the bridge
    """
    # Read from env if not provided
    if debug is None:
        debug = os.environ.get("SSE_BRIDGE_DEBUG", "").lower() in ("true", "1", "yes")
    if log_file is None:
        log_file = os.environ.get("SSE_BRIDGE_LOG_FILE") or None

    # Set log level
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter with component tags
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Get root bridge logger
    logger = logging.getLogger("sse_bridge")
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    # Stderr is the diagnostic channel
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(level)
    logger.addHandler(stderr_handler)

    # Add file handler if specified
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
        logger.debug(f"Logging to file: {log_path}")

    return logger


def get_logger(component: str) -> logging.Logger:
    """
    Get a logger for a specific component.

    Args:
        component: Component name (e.g., "supervisor", "events", "forwarder")

    Returns:
        Logger instance for the component
    """
    return logging.getLogger(f"sse_bridge.{component}")
