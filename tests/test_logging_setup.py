# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from scriptdesk.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("scriptdesk.core.session", logging.INFO, True),
        ("scriptdesk.run", logging.INFO, True),
        ("scriptdesk.remote.client", logging.INFO, False),
        ("scriptdesk.remote.client", logging.WARNING, True),
        ("scriptdesk.core.notifications", logging.DEBUG, False),
        ("scriptdesk.core.notifications", logging.ERROR, True),
        ("scriptdeskish", logging.WARNING, False),
        ("py.warnings", logging.WARNING, False),
        ("prompt_toolkit", logging.ERROR, True),
    ],
)
def test_console_filter_floors(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def test_script_output_goes_to_runs_log(tmp_path: Path, restore_root_logging) -> None:
    setup_logging(log_dir=tmp_path / "logs")

    logging.getLogger("scriptdesk.run").info("[alpha] hello from the script")
    logging.getLogger("scriptdesk.core.session").info("Selected task 'alpha'")
    for h in logging.getLogger().handlers:
        h.flush()

    runs = (tmp_path / "logs" / "runs.log").read_text("utf-8")
    full = (tmp_path / "logs" / "scriptdesk.log").read_text("utf-8")
    assert "[alpha] hello from the script" in runs
    assert "Selected task" not in runs
    assert "[alpha] hello from the script" in full
    assert "Selected task 'alpha'" in full
