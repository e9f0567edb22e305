# tests/test_shortcuts.py

from __future__ import annotations

import pytest

from scriptdesk.cli.shortcuts import KeyChord, ShortcutMap
from scriptdesk.cli.view import EMPTY_LIST_TEXT, ControlState, render_task_list


def test_shortcut_table() -> None:
    assert ShortcutMap.match(KeyChord("s", ctrl=True)) == "save"
    assert ShortcutMap.match(KeyChord("S", meta=True)) == "save"
    assert ShortcutMap.match(KeyChord("R", ctrl=True, shift=True)) == "run"
    assert ShortcutMap.match(KeyChord("r", ctrl=True)) is None
    assert ShortcutMap.match(KeyChord("s")) is None


@pytest.mark.asyncio
async def test_shortcuts_only_fire_with_a_selection(session, remote) -> None:
    shortcuts = ShortcutMap(session)
    chord = KeyChord("s", ctrl=True)
    assert shortcuts.dispatch(chord) is None

    await session.select_task("alpha")
    action = shortcuts.dispatch(chord)
    assert action == "save"

    outcome = await shortcuts.trigger(action)
    assert outcome.ok
    assert remote.ops()[-1] == "put"


@pytest.mark.asyncio
async def test_control_state_follows_selection(session) -> None:
    assert ControlState.from_session(session) == ControlState(False, False, False, False, False)
    await session.select_task("beta")
    assert ControlState.from_session(session) == ControlState(True, True, True, True, True)


def test_render_task_list() -> None:
    assert render_task_list([]) == EMPTY_LIST_TEXT
    assert render_task_list(["a", "b"], active="b") == "  a\n* b"
