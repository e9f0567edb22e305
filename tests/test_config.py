# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from scriptdesk.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in (
        "SCRIPTDESK_BASE_URL",
        "SCRIPTDESK_SCRIPT_ENDPOINT",
        "SCRIPTDESK_DATA_DIR",
        "SCRIPTDESK_WORKFILE_PATH",
        "SCRIPTDESK_EXPORT_PATH",
        "SCRIPTDESK_NOTIFY_TIMEOUT_SECONDS",
        "SCRIPTDESK_CONFIRM_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()

    assert s.base_url == "http://127.0.0.1:8080"
    assert s.script_endpoint == "scripts"
    assert s.notify_timeout == 5.0
    assert s.confirm_timeout == 10.0
    assert s.workfile_path == Path(".local/scriptdesk") / "current.js"
    assert s.export_path == Path(".local/scriptdesk") / "task-scripts.zip"


def test_overrides_and_bad_numbers(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SCRIPTDESK_BASE_URL", "https://tasks.example/")
    monkeypatch.setenv("SCRIPTDESK_SCRIPT_ENDPOINT", "/exec/")
    monkeypatch.setenv("SCRIPTDESK_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("SCRIPTDESK_EXPORT_PATH", raising=False)
    monkeypatch.setenv("SCRIPTDESK_NOTIFY_TIMEOUT_SECONDS", "soon")

    s = Settings.from_env()

    assert s.base_url == "https://tasks.example"
    assert s.script_endpoint == "exec"
    assert s.export_path == tmp_path / "task-scripts.zip"
    assert s.notify_timeout == 5.0
