#!/usr/bin/env python3
"""
SSE Bridge Entrypoint

Dispatches to the appropriate mode based on command line argument.

Modes:
  bridge       - Run the stdio-to-SSE bridge (default)
  probe        - Exit 0 if the upstream answers at the given URL, 1 otherwise
  init-config  - Write the default config file if it does not exist yet
"""

import sys

MODES = ("bridge", "probe", "init-config")


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    mode = argv.pop(0) if argv and argv[0] in MODES else "bridge"

    if mode == "bridge":
        from sse_bridge.controllers.bridge import main as bridge_main
        bridge_main(argv)

    elif mode == "probe":
        from sse_bridge.configs import get_logger, load_config, setup_logging
        from sse_bridge.exceptions import ConfigurationError
        from sse_bridge.utils.http_client import http_probe

        setup_logging()
        logger = get_logger("entrypoint")

        try:
            config = load_config(sse_url=argv[0] if argv else None)
        except ConfigurationError as e:
            logger.error(str(e))
            sys.exit(2)

        url = config.endpoints.event_url
        if http_probe(url, timeout=config.probe_timeout):
            logger.info(f"Upstream is up at {url}")
            sys.exit(0)
        logger.warning(f"Nothing listening at {url}")
        sys.exit(1)

    elif mode == "init-config":
        from sse_bridge.configs import create_default_config, get_config_path

        path = get_config_path()
        if create_default_config():
            print(f"Created {path}", file=sys.stderr)
        else:
            print(f"Config already exists: {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
