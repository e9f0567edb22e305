# src/scriptdesk/logging_setup.py

"""
Logging for the interactive client.

Three sinks:
- stderr: what the person at the prompt needs (filtered, see CONSOLE_FLOORS)
- <log_dir>/scriptdesk.log: everything, for debugging
- <log_dir>/runs.log: console output of executed task scripts only ("scriptdesk.run")
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

RUN_LOGGER = "scriptdesk.run"

# Minimum level shown on stderr, by logger prefix. The longest matching prefix wins.
CONSOLE_FLOORS: dict[str, int] = {
    "scriptdesk": logging.NOTSET,
    # every request is logged; failures already reach the user as notifications
    "scriptdesk.remote": logging.WARNING,
    # the prompt prints notifications itself
    "scriptdesk.core.notifications": logging.WARNING,
    "py.warnings": logging.ERROR,
}
DEFAULT_CONSOLE_FLOOR = logging.ERROR


def _floor_for(name: str) -> int:
    best, floor = -1, DEFAULT_CONSOLE_FLOOR
    for prefix, level in CONSOLE_FLOORS.items():
        if (name == prefix or name.startswith(prefix + ".")) and len(prefix) > best:
            best, floor = len(prefix), level
    return floor


class _ConsoleNoiseFilter(logging.Filter):
    """Keep the prompt readable: own logs pass, chatty parts and third parties need a higher level."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= _floor_for(record.name)


class _OnlyRunOutput(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.name == RUN_LOGGER or record.name.startswith(RUN_LOGGER + ".")


def setup_logging(
    *,
    log_dir: str | Path = ".local/scriptdesk",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """Install the three sinks on the root logger. Call once, before the first log line."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    full = logging.FileHandler(str(log_dir / "scriptdesk.log"), encoding="utf-8")
    full.setLevel(file_level)
    full.setFormatter(fmt)
    root.addHandler(full)

    runs = logging.FileHandler(str(log_dir / "runs.log"), encoding="utf-8")
    runs.setLevel(logging.INFO)
    runs.setFormatter(logging.Formatter("%(asctime)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    runs.addFilter(_OnlyRunOutput())
    root.addHandler(runs)

    logging.captureWarnings(True)

    # Request lines from httpx are noise even in the debug file.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
