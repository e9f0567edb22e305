# src/scriptdesk/cli/view.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from ..core.notifications import Confirmation, Notification, Severity
from ..core.session import Selected, TaskSession

EMPTY_LIST_TEXT = "No tasks available"

_SEVERITY_TAGS = {
    Severity.INFO: "info",
    Severity.SUCCESS: " ok ",
    Severity.ERROR: "FAIL",
    Severity.WARNING: "warn",
}


@dataclass(frozen=True, slots=True)
class ControlState:
    """Which task-scoped controls are usable. All of them need a selected task."""

    name_field: bool
    save: bool
    delete: bool
    run: bool
    browse: bool

    @classmethod
    def from_session(cls, session: TaskSession) -> ControlState:
        on = isinstance(session.state, Selected)
        return cls(name_field=on, save=on, delete=on, run=on, browse=on)


def render_task_list(names: Iterable[str], active: str | None = None) -> str:
    names = list(names)
    if not names:
        return EMPTY_LIST_TEXT
    return "\n".join(f"{'*' if name == active else ' '} {name}" for name in names)


def render_controls(controls: ControlState) -> str:
    parts = []
    for label, enabled in (
        ("save", controls.save),
        ("run", controls.run),
        ("delete", controls.delete),
        ("browse", controls.browse),
    ):
        parts.append(label if enabled else f"({label})")
    return " ".join(parts)


def render_notification(item: Notification) -> str:
    ts = datetime.fromtimestamp(item.created_at).astimezone().strftime("%H:%M:%S")
    if isinstance(item, Confirmation):
        return f"[{ts}] [#{item.id} ?] {item.message}  (/confirm {item.id} | /cancel {item.id})"
    return f"[{ts}] [{_SEVERITY_TAGS.get(item.severity, 'info')}] {item.message}"
