#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .app import LobstersApp
from .config import BASE_URL, load_config, setup_logging
from .sources.lobsters import LobstersSource

logger = logging.getLogger("lobsters")


# --- Entrypoint ---
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Terminal client for lobste.rs")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--base-url",
        type=str,
        help=f"Site to browse (default: config 'base_url' or {BASE_URL})",
    )
    args = parser.parse_args(argv)

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    config = load_config()
    if args.base_url:
        config["base_url"] = args.base_url
    logger.info("Browsing %s", config.get("base_url", BASE_URL))

    try:
        app = LobstersApp(source=LobstersSource(config), config=config)
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)
        return 1
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
