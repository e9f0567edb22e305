# src/scriptdesk/cli/shortcuts.py

"""
Global keyboard shortcuts.

- modifier+S        -> save
- modifier+Shift+R  -> run

"modifier" is Ctrl or Meta. Shortcuts are live only while a task is selected;
when dispatch() returns an action the caller must swallow the key so the
terminal's own handling never sees it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..core.session import Outcome, TaskSession


@dataclass(frozen=True, slots=True)
class KeyChord:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def modifier(self) -> bool:
        return self.ctrl or self.meta


class ShortcutMap:
    def __init__(self, session: TaskSession) -> None:
        self._session = session
        self._actions: dict[str, Callable[[], Awaitable[Outcome]]] = {
            "save": session.save,
            "run": session.run,
        }

    @property
    def active(self) -> bool:
        return self._session.selected_name is not None

    @staticmethod
    def match(chord: KeyChord) -> str | None:
        if not chord.modifier:
            return None
        key = chord.key.lower()
        if key == "r" and chord.shift:
            return "run"
        if key == "s":
            return "save"
        return None

    def dispatch(self, chord: KeyChord) -> str | None:
        if not self.active:
            return None
        return self.match(chord)

    async def trigger(self, action: str) -> Outcome:
        return await self._actions[action]()
