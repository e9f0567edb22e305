# src/scriptdesk/core/session.py

"""
Task session state machine.

TaskSession is the single writer of three things:
- the session state (Unselected, or Selected(name, last_loaded_code)),
- the cached task inventory (display only; the server owns the real list),
- the editor buffer.

Key invariants:
- at most one task is selected; selecting replaces the previous selection outright,
- the buffer holds either the default template (Unselected) or the latest code
  loaded/saved for the selected task,
- a failed operation leaves state exactly as it was (never half-applied),
- no error escapes a public operation: each one returns an Outcome and reports
  failures through the notification queue.

Concurrency model:
Everything runs on one asyncio loop, so there are no locks. Operations suspend only
at remote calls, and nothing is cancelled: a slow response may land after a newer
user action. Selection-changing operations (select, create, confirmed delete)
therefore take a ticket, and a load or create is applied only if no newer one has
started since (last writer wins). Task listings carry their own sequence number,
so an older listing never replaces a newer one. Save completions are applied only
while the same task is still selected.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import DEFAULT_TEMPLATE
from .errors import RemoteError, ScriptDeskError, ValidationError
from .notifications import NotificationQueue, Severity
from .ports import EditorBuffer, TaskRemote

logger = logging.getLogger(__name__)
run_logger = logging.getLogger("scriptdesk.run")


@dataclass(slots=True, frozen=True)
class Unselected:
    pass


@dataclass(slots=True, frozen=True)
class Selected:
    name: str
    last_loaded_code: str


SessionState = Unselected | Selected


@dataclass(slots=True, frozen=True)
class Outcome:
    ok: bool
    message: str = ""
    value: Any = None
    error: Exception | None = None


SessionListener = Callable[["TaskSession"], None]


def task_template(name: str) -> str:
    return f"// JavaScript task script for {name}\n\n"


class TaskSession:
    def __init__(
        self,
        remote: TaskRemote,
        editor: EditorBuffer,
        notifications: NotificationQueue,
        *,
        default_template: str = DEFAULT_TEMPLATE,
        export_path: str | Path = "task-scripts.zip",
        export_ack_delay: float = 1.0,
    ) -> None:
        self._remote = remote
        self._editor = editor
        self._notifications = notifications
        self._default_template = default_template
        self._export_path = Path(export_path)
        self._export_ack_delay = max(0.0, float(export_ack_delay))

        self._state: SessionState = Unselected()
        self._inventory: tuple[str, ...] = ()
        self._ticket = 0
        self._list_seq = 0
        self._inventory_seq = 0
        self._started = False
        self._listeners: list[SessionListener] = []
        self._background: set[asyncio.Task[Any]] = set()

        self._editor.set_text(self._default_template)

    # ---- read-only view ----

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def inventory(self) -> tuple[str, ...]:
        return self._inventory

    @property
    def selected_name(self) -> str | None:
        return self._state.name if isinstance(self._state, Selected) else None

    @property
    def notifications(self) -> NotificationQueue:
        return self._notifications

    @property
    def editor(self) -> EditorBuffer:
        return self._editor

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def browse_url(self) -> str | None:
        name = self.selected_name
        return self._remote.execute_url(name) if name is not None else None

    # ---- internal helpers ----

    def _changed(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("session listener failed")

    def _next_ticket(self) -> int:
        self._ticket += 1
        return self._ticket

    def _is_current(self, ticket: int) -> bool:
        return ticket == self._ticket

    def _apply_selection(self, name: str, code: str) -> Outcome | None:
        """Buffer first, then state: if the buffer write fails nothing changes."""
        try:
            self._editor.set_text(code or self._default_template)
        except OSError as e:
            return self._report(e, f"Failed to open '{name}' in the editor")
        self._state = Selected(name=name, last_loaded_code=code)
        logger.info("Selected task %r", name)
        self._changed()
        return None

    def _clear_selection(self) -> Outcome | None:
        try:
            self._editor.set_text(self._default_template)
        except OSError as e:
            return self._report(e, "Failed to reset the editor")
        self._state = Unselected()
        logger.info("Selection cleared")
        self._changed()
        return None

    def _begin_listing(self) -> int:
        self._list_seq += 1
        return self._list_seq

    def _apply_inventory(self, seq: int, names: list[str]) -> bool:
        # Listings are ordered by when they were requested, not when they answered.
        if seq < self._inventory_seq:
            logger.debug("Stale task list dropped seq=%s applied=%s", seq, self._inventory_seq)
            return False
        self._inventory_seq = seq
        self._inventory = tuple(names)
        self._changed()
        return True

    def _report(self, exc: Exception, prefix: str) -> Outcome:
        """Turn a failure into exactly one error notification."""
        if isinstance(exc, RemoteError):
            logger.info("%s: %r", prefix, exc)
            detail = exc.message
        elif isinstance(exc, ScriptDeskError):
            logger.info("%s: %s", prefix, exc)
            detail = str(exc)
        elif isinstance(exc, OSError):
            logger.warning("%s: %s", prefix, exc)
            detail = exc.strerror or str(exc)
        else:
            logger.error("%s: unexpected error", prefix, exc_info=exc)
            detail = "internal error"
        message = f"{prefix}: {detail}" if detail else prefix
        self._notifications.notify(message, Severity.ERROR)
        return Outcome(ok=False, message=message, error=exc)

    def _require_selection(self, action: str) -> Selected | Outcome:
        state = self._state
        if isinstance(state, Selected):
            return state
        return self._report(ValidationError("no task selected"), f"Cannot {action}")

    async def _refresh_inventory(self) -> bool:
        """Inventory refresh that follows another operation: failures are logged, not notified."""
        seq = self._begin_listing()
        try:
            names = await self._remote.list_names()
        except Exception:
            logger.warning("Inventory refresh failed", exc_info=True)
            return False
        return self._apply_inventory(seq, names)

    async def _persist(self, name: str, code: str) -> Outcome:
        try:
            ack = await self._remote.put(name, code)
        except Exception as e:
            return self._report(e, "Save failed")

        state = self._state
        if isinstance(state, Selected) and state.name == name:
            self._state = Selected(name=name, last_loaded_code=code)
            self._changed()
        else:
            logger.debug("Save of %r completed after selection changed; not applied", name)
        return Outcome(ok=True, message=f"'{name}' saved", value=ack)

    # ---- lifecycle ----

    async def start(self) -> Outcome:
        """Wait for the editor, then populate the inventory once."""
        if self._started:
            return Outcome(ok=True, message="already started")
        self._started = True
        await self._editor.wait_ready()
        return await self.list_tasks()

    async def drain(self) -> None:
        """Wait for background work (export downloads) to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ---- operations ----

    async def list_tasks(self) -> Outcome:
        seq = self._begin_listing()
        try:
            names = await self._remote.list_names()
        except Exception as e:
            return self._report(e, "Failed to load task list")
        self._apply_inventory(seq, names)
        return Outcome(ok=True, value=self._inventory)

    async def create_task(self, name: str) -> Outcome:
        name = (name or "").strip()
        if not name:
            return self._report(ValidationError("Task name cannot be empty"), "Cannot create task")

        ticket = self._next_ticket()
        template = task_template(name)
        try:
            ack = await self._remote.put(name, template)
        except Exception as e:
            return self._report(e, f"Failed to create '{name}'")

        await self._refresh_inventory()

        # A collision is an overwrite on the server; its own wording is shown as-is.
        message = f"'{name}' created"
        if isinstance(ack, dict) and ack.get("message"):
            message = str(ack["message"])
        if not self._is_current(ticket):
            logger.debug("Create of %r completed after a newer selection; not selecting it", name)
        else:
            failed = self._apply_selection(name, template)
            if failed is not None:
                return failed
        self._notifications.notify(message, Severity.SUCCESS)
        return Outcome(ok=True, message=message, value=ack)

    async def select_task(self, name: str) -> Outcome:
        # Unsaved edits of the current task are discarded without a prompt.
        ticket = self._next_ticket()
        try:
            code = await self._remote.get(name)
        except Exception as e:
            if not self._is_current(ticket):
                logger.debug("Stale load failure for %r dropped: %r", name, e)
                return Outcome(ok=False, message="superseded", error=e)
            return self._report(e, f"Failed to load '{name}'")

        if not self._is_current(ticket):
            logger.debug("Stale load of %r dropped", name)
            return Outcome(ok=False, message="superseded")

        failed = self._apply_selection(name, code)
        if failed is not None:
            return failed
        return Outcome(ok=True, value=code)

    async def save(self) -> Outcome:
        state = self._require_selection("save")
        if isinstance(state, Outcome):
            return state

        outcome = await self._persist(state.name, self._editor.get_text())
        if outcome.ok:
            self._notifications.notify(outcome.message, Severity.SUCCESS)
        return outcome

    async def run(self) -> Outcome:
        """Save the buffer as it is right now, then execute; execute never starts before the save lands."""
        state = self._require_selection("run")
        if isinstance(state, Outcome):
            return state

        name = state.name
        saved = await self._persist(name, self._editor.get_text())
        if not saved.ok:
            return saved

        try:
            result = await self._remote.execute(name)
        except Exception as e:
            return self._report(e, f"Run failed: {name}")

        for line in result.console:
            run_logger.info("[%s] %s", name, line)

        if result.error:
            message = f"Run failed: {name}: {result.error}"
            logger.info("%s", message)
            self._notifications.notify(message, Severity.ERROR)
            return Outcome(ok=False, message=message, value=result)

        message = f"Ran '{name}'" + (f": {result.output}" if result.output else "")
        self._notifications.notify(message, Severity.SUCCESS)
        return Outcome(ok=True, message=message, value=result)

    async def delete(self) -> Outcome:
        state = self._require_selection("delete")
        if isinstance(state, Outcome):
            return state

        name = state.name
        confirmation = self._notifications.confirm(f"Delete task script '{name}'?")
        if not await confirmation.wait():
            logger.debug("Delete of %r cancelled", name)
            return Outcome(ok=False, message="cancelled")

        # Confirmed: loads started before this point must not re-select anything.
        self._next_ticket()
        try:
            await self._remote.remove(name)
        except Exception as e:
            return self._report(e, f"Failed to delete '{name}'")

        message = f"'{name}' deleted"
        self._notifications.notify(message, Severity.SUCCESS)
        await self._refresh_inventory()

        current = self._state
        if isinstance(current, Selected) and current.name == name:
            failed = self._clear_selection()
            if failed is not None:
                return failed
        return Outcome(ok=True, message=message)

    async def import_bundle(self, path: str | Path) -> Outcome:
        # The selection is left alone even if the bundle overwrites the open task.
        self._notifications.notify("Importing scripts...", Severity.INFO)
        try:
            message = await self._remote.import_bundle(Path(path))
        except Exception as e:
            return self._report(e, "Import failed")

        self._notifications.notify(message, Severity.SUCCESS)
        await self._refresh_inventory()
        return Outcome(ok=True, message=message)

    async def export_bundle(self) -> Outcome:
        """
        Start the export download in the background.

        The acknowledgement is best-effort: it fires after export_ack_delay whether or
        not the download succeeds; download failures only reach the log.
        """
        self._notifications.notify("Exporting scripts...", Severity.INFO)

        task = asyncio.create_task(self._download_export(), name="scriptdesk-export")
        self._background.add(task)
        task.add_done_callback(self._background.discard)

        loop = asyncio.get_running_loop()
        loop.call_later(self._export_ack_delay, self._notifications.notify, "Scripts exported", Severity.SUCCESS)
        return Outcome(ok=True, message=str(self._export_path), value=task)

    async def _download_export(self) -> None:
        try:
            await self._remote.export_bundle(self._export_path)
        except RemoteError as e:
            logger.warning("Export download failed: %r", e)
        except Exception:
            logger.exception("Export download crashed")
