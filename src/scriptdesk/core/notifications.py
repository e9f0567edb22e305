# src/scriptdesk/core/notifications.py

"""
Transient user-facing notifications.

Behavior:
- notify() never fails and returns a handle; the item auto-dismisses after info_timeout.
- confirm() shows a two-action item (confirm / cancel) that lives for confirm_timeout.
  Exactly one of its handlers fires, exactly once. Expiry and plain dismissal count as cancel.
- Items are kept in insertion order; dismissing one never touches another.

Timers use the running asyncio loop. Without a running loop (plain sync code),
items simply stay until dismissed.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class Severity(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


@dataclass(slots=True, eq=False)
class Notification:
    id: int
    message: str
    severity: Severity
    created_at: float
    timeout: float
    dismissed: bool = False
    _timer: asyncio.TimerHandle | None = field(default=None, repr=False)


@dataclass(slots=True, eq=False)
class Confirmation(Notification):
    on_confirm: Callable[[], Any] | None = field(default=None, repr=False)
    on_cancel: Callable[[], Any] | None = field(default=None, repr=False)
    decision: bool | None = None
    _future: asyncio.Future[bool] | None = field(default=None, repr=False)

    @property
    def resolved(self) -> bool:
        return self.decision is not None

    async def wait(self) -> bool:
        """Wait until the user confirms (True) or cancels / lets it expire (False)."""
        if self.decision is not None:
            return self.decision
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return await self._future


Listener = Callable[[str, Notification], None]


class NotificationQueue:
    def __init__(
        self,
        *,
        info_timeout: float = 5.0,
        confirm_timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._info_timeout = float(info_timeout)
        self._confirm_timeout = float(confirm_timeout)
        self._clock = clock
        self._ids = itertools.count(1)
        self._items: dict[int, Notification] = {}
        self._listeners: list[Listener] = []

    # ---- observers ----

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: str, item: Notification) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, item)
            except Exception:
                logger.exception("notification listener failed event=%s id=%s", event, item.id)

    # ---- queries ----

    def visible(self) -> list[Notification]:
        # dict preserves insertion order
        return [n for n in self._items.values() if not n.dismissed]

    def pending_confirmations(self) -> list[Confirmation]:
        return [n for n in self.visible() if isinstance(n, Confirmation) and not n.resolved]

    def get(self, notification_id: int) -> Notification | None:
        return self._items.get(notification_id)

    # ---- producers ----

    def notify(self, message: str, severity: Severity | str = Severity.INFO) -> Notification:
        try:
            sev = Severity(severity)
        except ValueError:
            sev = Severity.INFO
        item = Notification(
            id=next(self._ids),
            message=str(message),
            severity=sev,
            created_at=self._clock(),
            timeout=self._info_timeout,
        )
        self._show(item)
        return item

    def confirm(
        self,
        message: str,
        on_confirm: Callable[[], Any] | None = None,
        on_cancel: Callable[[], Any] | None = None,
    ) -> Confirmation:
        item = Confirmation(
            id=next(self._ids),
            message=str(message),
            severity=Severity.WARNING,
            created_at=self._clock(),
            timeout=self._confirm_timeout,
            on_confirm=on_confirm,
            on_cancel=on_cancel,
        )
        loop = _running_loop()
        if loop is not None:
            item._future = loop.create_future()
        self._show(item)
        return item

    def _show(self, item: Notification) -> None:
        self._items[item.id] = item
        loop = _running_loop()
        if loop is not None:
            item._timer = loop.call_later(item.timeout, self._expire, item.id)
        logger.debug("notification shown id=%s severity=%s", item.id, item.severity.value)
        self._emit("shown", item)

    # ---- resolution ----

    def dismiss(self, handle: Notification | int) -> None:
        item = self._lookup(handle)
        if item is None or item.dismissed:
            return
        if isinstance(item, Confirmation) and not item.resolved:
            self._resolve(item, False)
            return
        self._remove(item)

    def accept(self, handle: Confirmation | int) -> None:
        item = self._lookup(handle)
        if isinstance(item, Confirmation):
            self._resolve(item, True)

    def reject(self, handle: Confirmation | int) -> None:
        item = self._lookup(handle)
        if isinstance(item, Confirmation):
            self._resolve(item, False)

    def clear(self) -> None:
        for item in self.visible():
            self.dismiss(item)

    def _expire(self, notification_id: int) -> None:
        item = self._items.get(notification_id)
        if item is None:
            return
        item._timer = None
        self.dismiss(item)

    def _resolve(self, item: Confirmation, affirmed: bool) -> None:
        if item.resolved:
            return
        item.decision = affirmed
        callback = item.on_confirm if affirmed else item.on_cancel
        # Detach before firing so a re-entrant click cannot fire twice.
        item.on_confirm = None
        item.on_cancel = None
        self._remove(item)

        if item._future is not None and not item._future.done():
            item._future.set_result(affirmed)

        if callback is not None:
            try:
                callback()
            except Exception:
                logger.exception("confirmation handler failed id=%s affirmed=%s", item.id, affirmed)

    def _remove(self, item: Notification) -> None:
        if item.dismissed:
            return
        item.dismissed = True
        if item._timer is not None:
            item._timer.cancel()
            item._timer = None
        self._items.pop(item.id, None)
        self._emit("dismissed", item)

    def _lookup(self, handle: Notification | int) -> Notification | None:
        if isinstance(handle, Notification):
            return handle
        return self._items.get(int(handle))


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
