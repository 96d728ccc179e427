from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

# --- Configuration ---
BASE_URL = "https://lobste.rs"
STORIES_PER_SITE_PAGE = 25
HTTP_TIMEOUT = 15

CONFIG_PATH = os.path.expanduser("~/.config/lobsters/config.json")

REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64; rv:115.0) "
        "Gecko/20100101 Firefox/115.0"
    )
}
RETRY_ATTEMPTS = 3
INITIAL_RETRY_DELAY = 0.5

# Terminal rows per story in the list view.
ROWS_PER_STORY = 3

UI_DEFAULTS = {
    "statusbar_keybindings": (
        "[b]j/k[/] move  [b]J/K[/] page  [b]l/h[/] comments  "
        "[b]o[/] open  [b]r[/] retry  [b]q[/] quit"
    ),
}

# --- Logging ---
logger = logging.getLogger("lobsters")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/lobsters_debug_{ts}_{pid}.log"

    # The terminal belongs to the TUI, so debug output goes to a file.
    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load the configuration file, or an empty config if there is none."""
    if not os.path.exists(path):
        logger.debug("No config file at %s, using defaults", path)
        return {}
    try:
        with open(path, "r") as f:
            config = json.load(f)
    except (IOError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        return {}
    if not isinstance(config, dict):
        logger.error("Ignoring config at %s: expected a JSON object", path)
        return {}
    logger.info("Loaded config from %s", path)
    return config


def display_page_size(rows: int) -> int:
    """Number of stories shown per list page on a terminal ``rows`` high."""
    return max(1, rows // ROWS_PER_STORY)
