# src/scriptdesk/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from prompt_toolkit import PromptSession
from prompt_toolkit.filters import Condition
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.patch_stdout import patch_stdout

from ..cli.commands import registry as command_registry
from ..cli.shortcuts import KeyChord, ShortcutMap
from ..cli.view import render_notification, render_task_list
from ..core.notifications import Notification
from ..core.session import TaskSession
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _spawn(state: AppState, coro, label: str) -> asyncio.Task:
    """
    Run one user action as its own task.

    Actions never block the prompt: a delete may sit on its confirmation
    while the user keeps typing (/confirm, /cancel, other commands).
    """
    task = asyncio.create_task(coro, name=f"scriptdesk-{label}")
    state.running.add(task)

    def _done(t: asyncio.Task) -> None:
        state.running.discard(t)
        if t.cancelled():
            return
        exc = t.exception()
        if exc is not None:
            logger.error("Action %s crashed.", label, exc_info=exc)
            _print_ts("Internal error while handling a command.")

    task.add_done_callback(_done)
    return task


def build_key_bindings(state: AppState, shortcuts: ShortcutMap) -> KeyBindings:
    kb = KeyBindings()
    task_selected = Condition(lambda: shortcuts.active)

    def _fire(chord: KeyChord) -> None:
        action = shortcuts.dispatch(chord)
        if action is None:
            return
        _spawn(state, shortcuts.trigger(action), action)

    @kb.add("c-s", filter=task_selected, eager=True)
    def _save(event) -> None:
        _fire(KeyChord("s", ctrl=True))

    # Terminals cannot report Ctrl+Shift; Esc (Meta) + Shift+R stands in for it.
    @kb.add("escape", "R", filter=task_selected, eager=True)
    def _run(event) -> None:
        _fire(KeyChord("r", meta=True, shift=True))

    return kb


async def _run_command(state: AppState, line: str) -> None:
    def emit(text: str) -> None:
        _print_ts(text)

    try:
        reply = await command_registry.handle(state, line, emit=emit)
    except Exception:
        logger.exception("Command handler crashed.")
        reply = "Internal error while handling a command."

    if reply:
        _print_ts(reply)


async def run_console_loop(state: AppState) -> None:
    session: TaskSession = state.session
    shortcuts = ShortcutMap(session)
    app_name = str(getattr(state.settings, "app_name", "scriptdesk"))

    def on_notification(event: str, item: Notification) -> None:
        if event == "shown":
            print(render_notification(item), flush=True)

    state.notifications.subscribe(on_notification)

    prompt = PromptSession(key_bindings=build_key_bindings(state, shortcuts))

    def prompt_text() -> str:
        return f"{app_name}:{session.selected_name or '-'}> "

    logger.info("Console connector started (server=%s).", getattr(state.settings, "base_url", "?"))

    with patch_stdout():
        _print_ts("[CONSOLE] Type /help for commands, /exit to quit.")

        # The working file exists from here on; the initial listing waits for this.
        state.editor.open()
        start = await session.start()
        if start.ok:
            print(render_task_list(session.inventory, session.selected_name), flush=True)

        while True:
            try:
                line = (await prompt.prompt_async(prompt_text)).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                break

            if not line:
                continue

            if line.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not command_registry.is_command(line):
                _print_ts("Commands start with '/'. Use /help to list them.")
                continue

            _spawn(state, _run_command(state, line), line.split()[0].lstrip("/") or "command")

    logger.info("Console connector finished.")
