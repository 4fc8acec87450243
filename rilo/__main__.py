"""rilo CLI entry point.

Allows running via `python -m rilo [path]` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import platformdirs

from .errors import StartupFailure
from .settings import APP_NAME, SettingsStore

USAGE = "usage: rilo [path]"


def configure_logging(level: str = "WARNING") -> None:
    """Send the package's log records to a file in the user log directory.

    The terminal is in raw mode while the editor runs, so nothing may be
    logged to stderr.
    """
    logger = logging.getLogger("rilo")
    log_dir = Path(platformdirs.user_log_dir(APP_NAME))
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_dir / "rilo.log", encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) > 1 or (args and args[0].startswith('-') and args[0] != '-'):
        print(USAGE, file=sys.stderr)
        return 2

    settings = SettingsStore().load()
    configure_logging(settings.log_level)

    # Lazy import so usage errors don't need a terminal
    from .editor import Editor
    try:
        editor = Editor(settings=settings)
        if args:
            editor.load_file(args[0])
        editor.run()
    except StartupFailure as e:
        logging.getLogger(__name__).error(f"Startup failed: {e}")
        print(f"rilo: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
