# src/scriptdesk/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..editor.buffer import FileEditorBuffer
from ..remote.client import HttpTaskClient
from .notifications import NotificationQueue
from .session import TaskSession


@dataclass
class AppState:
    """Everything the console front-end needs, wired once in bootstrap."""

    settings: Any
    remote: HttpTaskClient
    editor: FileEditorBuffer
    notifications: NotificationQueue
    session: TaskSession

    # Commands in flight (a delete may wait on its confirmation for a while).
    running: set[Any] = field(default_factory=set)
