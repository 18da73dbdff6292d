"""Restart the bot in test mode whenever a source file changes.

Usage:
    python scripts/dev.py

Requires the ``dev`` extra (``pip install -e .[dev]``) for ``watchfiles``.
"""

from __future__ import annotations

import os
import sys


def main() -> int:
    # The dev runner never talks to the production guild
    os.environ["BOT_ENV"] = "test"

    try:
        from watchfiles import run_process  # type: ignore[import-untyped]
    except ImportError:
        print("watchfiles is not installed. Run:  pip install -e .[dev]", file=sys.stderr)
        return 1

    print("Watching src/ for changes (BOT_ENV=test). Press Ctrl+C to stop.")
    run_process(
        "src",
        target=_run_bot,
        callback=_on_reload,
        watch_filter=_py_filter,
    )
    return 0


def _run_bot() -> None:
    from timeteller.__main__ import main as bot_main

    bot_main()


def _on_reload(changes: set) -> None:  # noqa: ANN001
    changed = sorted({str(path).replace("\\", "/").split("src/")[-1] for _, path in changes})
    print(f"Change detected in {', '.join(changed)}, restarting")


def _py_filter(change: object, path: str) -> bool:
    return path.endswith(".py")


if __name__ == "__main__":
    raise SystemExit(main())
