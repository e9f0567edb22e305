# src/scriptdesk/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
import subprocess
import webbrowser
from collections.abc import Awaitable, Callable
from typing import cast

from prompt_toolkit.application import run_in_terminal

from ..core.notifications import Confirmation
from ..core.session import Outcome, Selected
from ..core.state import AppState
from .view import ControlState, render_controls, render_task_list

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /open, /run, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def is_command(self, line: str) -> bool:
        return line.startswith("/")

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string ("" when there is nothing to print) or None if not a command.
        """
        if not self.is_command(line):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _quiet(outcome: Outcome) -> str:
    # The session already reported the outcome through a notification.
    return ""


def _pick_confirmation(state: AppState, args: list[str]) -> Confirmation | str:
    pending = state.notifications.pending_confirmations()
    if not pending:
        return "Nothing to confirm."
    if not args:
        return pending[-1]
    try:
        wanted = int(args[0].lstrip("#"))
    except ValueError:
        return f"Not a confirmation id: {args[0]}"
    for item in pending:
        if item.id == wanted:
            return item
    return f"No pending confirmation #{wanted}."


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    outcome = await state.session.list_tasks()
    if not outcome.ok:
        return ""
    return render_task_list(state.session.inventory, state.session.selected_name)


async def cmd_new(state: AppState, args: list[str]) -> str:
    return _quiet(await state.session.create_task(" ".join(args)))


async def cmd_open(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /open <task name>"
    outcome = await state.session.select_task(" ".join(args))
    if outcome.ok:
        return f"Opened '{state.session.selected_name}'. Edit with /edit, view with /show."
    return ""


async def cmd_save(state: AppState, args: list[str]) -> str:
    return _quiet(await state.session.save())


async def cmd_run(state: AppState, args: list[str]) -> str:
    return _quiet(await state.session.run())


async def cmd_delete(state: AppState, args: list[str]) -> str:
    return _quiet(await state.session.delete())


async def cmd_confirm(state: AppState, args: list[str]) -> str:
    picked = _pick_confirmation(state, args)
    if isinstance(picked, str):
        return picked
    state.notifications.accept(picked)
    return ""


async def cmd_cancel(state: AppState, args: list[str]) -> str:
    picked = _pick_confirmation(state, args)
    if isinstance(picked, str):
        return picked
    state.notifications.reject(picked)
    return ""


async def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /import <bundle.zip>"
    return _quiet(await state.session.import_bundle(args[0]))


async def cmd_export(state: AppState, args: list[str]) -> str:
    return _quiet(await state.session.export_bundle())


async def cmd_browse(state: AppState, args: list[str]) -> str:
    url = state.session.browse_url()
    if url is None:
        return "No task selected."
    try:
        opened = webbrowser.open(url, new=2)
    except Exception:
        logger.debug("webbrowser.open failed url=%s", url, exc_info=True)
        opened = False
    return url if opened else f"Open in a browser: {url}"


async def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """Open the working file in the external editor; the buffer is the file."""
    if not isinstance(state.session.state, Selected):
        return "No task selected."

    argv = shlex.split(state.settings.editor_command) + [str(state.editor.path)]
    if emit:
        emit(f"Editing {state.session.selected_name} with {argv[0]} ...")

    def _spawn() -> int:
        return subprocess.call(argv)

    try:
        code = await run_in_terminal(_spawn)
    except OSError as e:
        return f"Cannot start editor {argv[0]!r}: {e.strerror or e}"

    state.editor.request_layout()
    if code != 0:
        return f"Editor exited with status {code}."
    return "Edited. Use /save to store or /run to save and execute."


async def cmd_show(state: AppState, args: list[str]) -> str:
    state.editor.request_layout()
    title = state.session.selected_name or "(no task selected)"
    return f"--- {title} ---\n{state.editor.preview()}"


async def cmd_status(state: AppState, args: list[str]) -> str:
    session = state.session
    controls = ControlState.from_session(session)
    selected = session.selected_name or "-"
    return (
        "Status:\n"
        f"  Server: {state.settings.base_url} (endpoint /{state.settings.script_endpoint})\n"
        f"  Selected: {selected}\n"
        f"  Tasks known: {len(session.inventory)}\n"
        f"  Controls: {render_controls(controls)}\n"
        f"  Pending confirmations: {len(state.notifications.pending_confirmations())}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Reload and show the task list.", aliases=["ls"])
registry.register("new", cmd_new, help_text="Create a task: /new <name>.")
registry.register("open", cmd_open, help_text="Open a task: /open <name>.", aliases=["select"])
registry.register("save", cmd_save, help_text="Save the open task (Ctrl+S).")
registry.register("run", cmd_run, help_text="Save, then run the open task (Esc Shift+R).")
registry.register("delete", cmd_delete, help_text="Delete the open task (asks for confirmation).")
registry.register("confirm", cmd_confirm, help_text="Confirm a pending question: /confirm [id].", aliases=["y"])
registry.register("cancel", cmd_cancel, help_text="Cancel a pending question: /cancel [id].", aliases=["n"])
registry.register("import", cmd_import, help_text="Import a bundle: /import <file.zip>.")
registry.register("export", cmd_export, help_text="Export all tasks to the configured archive path.")
registry.register("browse", cmd_browse, help_text="Open the run endpoint of the open task in a browser.")
registry.register("edit", cmd_edit, help_text="Edit the open task in $EDITOR.")
registry.register("show", cmd_show, help_text="Print the editor buffer.")
registry.register("status", cmd_status, help_text="Show server, selection and control state.")
