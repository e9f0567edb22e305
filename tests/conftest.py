# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from scriptdesk.core.notifications import NotificationQueue
from scriptdesk.core.session import TaskSession
from scriptdesk.core.state import AppState
from scriptdesk.editor.buffer import FileEditorBuffer, MemoryEditorBuffer

from .fakes import FakeRemote


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="scriptdesk-test",
        base_url="http://fake.local",
        script_endpoint="scripts",
        data_dir=tmp_path,
        workfile_path=tmp_path / "current.js",
        export_path=tmp_path / "export" / "task-scripts.zip",
        editor_command="true",
        notify_timeout=60.0,
        confirm_timeout=60.0,
    )


@pytest.fixture()
def remote() -> FakeRemote:
    return FakeRemote({"alpha": "print('a')", "beta": "print('b')"})


@pytest.fixture()
def editor() -> MemoryEditorBuffer:
    return MemoryEditorBuffer(ready=True)


@pytest.fixture()
def notifications() -> NotificationQueue:
    # Long timeouts: tests dismiss explicitly unless they test expiry.
    return NotificationQueue(info_timeout=60.0, confirm_timeout=60.0)


@pytest.fixture()
def session(remote: FakeRemote, editor: MemoryEditorBuffer, notifications: NotificationQueue, settings) -> TaskSession:
    return TaskSession(
        remote,
        editor,
        notifications,
        export_path=settings.export_path,
        export_ack_delay=0.0,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, remote: FakeRemote) -> AppState:
    """AppState wired with the fake remote and a real file-backed buffer."""
    editor = FileEditorBuffer(settings.workfile_path)
    editor.open()
    notifications = NotificationQueue(info_timeout=60.0, confirm_timeout=60.0)
    session = TaskSession(
        remote,
        editor,
        notifications,
        export_path=settings.export_path,
        export_ack_delay=0.0,
    )
    return AppState(
        settings=settings,
        remote=remote,  # type: ignore[arg-type]
        editor=editor,
        notifications=notifications,
        session=session,
    )
