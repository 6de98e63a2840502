"""MindMapX launcher.

Provides a stable entry point that configures logging and runs preflight
checks before importing GTK-related modules.
"""

from __future__ import annotations

import logging
import os


def main() -> int:
    logging.basicConfig(
        level=os.environ.get("MINDMAPX_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from mindmapx.preflight import run_preflight_or_die

    run_preflight_or_die(require_display=True, check_deps=True)

    from mindmapx.app import main as app_main

    return int(app_main())


if __name__ == "__main__":
    raise SystemExit(main())
