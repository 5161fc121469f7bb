#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys

from .app import FeedsApp
from .config import load_config, setup_logging
from .datamodels import Mode

logger = logging.getLogger("feeds")


# --- Entrypoint ---
def main() -> None:
    parser = argparse.ArgumentParser(description="Feed subscriptions TUI")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        help="View mode for this run (default: from config, else all)",
    )
    args = parser.parse_args()

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    config = load_config()
    mode = args.mode or config.get("mode") or Mode.ALL.value
    if mode not in {m.value for m in Mode}:
        print(f"Mode '{mode}' not recognised, falling back to all.", file=sys.stderr)
        mode = Mode.ALL.value
    config["mode"] = mode

    logger.info("Using mode: %s", mode)

    try:
        app = FeedsApp(config=config)
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)


if __name__ == "__main__":
    main()
