# tests/test_notifications.py

from __future__ import annotations

import asyncio

import pytest

from scriptdesk.core.notifications import Confirmation, NotificationQueue, Severity


def test_notify_keeps_insertion_order() -> None:
    queue = NotificationQueue()
    first = queue.notify("one", Severity.ERROR)
    second = queue.notify("two")
    third = queue.notify("three", "success")

    assert queue.visible() == [first, second, third]
    assert [n.severity for n in queue.visible()] == [Severity.ERROR, Severity.INFO, Severity.SUCCESS]


def test_unknown_severity_falls_back_to_info() -> None:
    queue = NotificationQueue()
    assert queue.notify("hm", "loud").severity == Severity.INFO


def test_dismiss_is_idempotent_and_isolated() -> None:
    queue = NotificationQueue()
    events: list[tuple[str, int]] = []
    queue.subscribe(lambda event, item: events.append((event, item.id)))

    a = queue.notify("a")
    b = queue.notify("b")
    queue.dismiss(a)
    queue.dismiss(a)
    queue.dismiss(a.id)

    assert queue.visible() == [b]
    assert a.dismissed and not b.dismissed
    assert events == [("shown", a.id), ("shown", b.id), ("dismissed", a.id)]


def test_confirm_fires_exactly_once() -> None:
    queue = NotificationQueue()
    fired: list[str] = []
    item = queue.confirm("Delete?", on_confirm=lambda: fired.append("yes"), on_cancel=lambda: fired.append("no"))

    assert isinstance(item, Confirmation)
    assert item.severity == Severity.WARNING
    assert queue.pending_confirmations() == [item]

    queue.accept(item)
    queue.accept(item)
    queue.reject(item)
    queue.dismiss(item)

    assert fired == ["yes"]
    assert item.decision is True
    assert item.on_confirm is None and item.on_cancel is None
    assert queue.visible() == []


def test_dismissing_a_confirmation_counts_as_cancel() -> None:
    queue = NotificationQueue()
    fired: list[str] = []
    item = queue.confirm("Delete?", on_confirm=lambda: fired.append("yes"), on_cancel=lambda: fired.append("no"))

    queue.dismiss(item)

    assert fired == ["no"]
    assert item.decision is False


def test_resolving_one_confirmation_leaves_others() -> None:
    queue = NotificationQueue()
    first = queue.confirm("Delete 'a'?")
    second = queue.confirm("Delete 'a'?")

    queue.accept(second)

    assert queue.pending_confirmations() == [first]
    assert first.decision is None


def test_failing_handler_does_not_break_queue() -> None:
    queue = NotificationQueue()

    def boom() -> None:
        raise RuntimeError("handler bug")

    item = queue.confirm("Delete?", on_confirm=boom)
    queue.accept(item)

    assert item.decision is True
    assert queue.visible() == []


@pytest.mark.asyncio
async def test_notifications_expire_independently() -> None:
    queue = NotificationQueue(info_timeout=0.02, confirm_timeout=0.5)
    note = queue.notify("short lived")
    confirm = queue.confirm("Delete?")

    await asyncio.sleep(0.08)

    assert note.dismissed
    assert queue.visible() == [confirm]


@pytest.mark.asyncio
async def test_confirmation_expiry_resolves_as_cancel() -> None:
    queue = NotificationQueue(confirm_timeout=0.01)
    cancelled: list[bool] = []
    item = queue.confirm("Delete?", on_cancel=lambda: cancelled.append(True))

    assert await asyncio.wait_for(item.wait(), timeout=1.0) is False
    assert cancelled == [True]
    assert queue.visible() == []


@pytest.mark.asyncio
async def test_wait_returns_decision_made_before_waiting() -> None:
    queue = NotificationQueue()
    item = queue.confirm("Delete?")
    queue.accept(item)

    assert await item.wait() is True
