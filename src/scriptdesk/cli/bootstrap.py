# src/scriptdesk/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the HTTP client, editor buffer and notification queue into one TaskSession.

The session receives plain values (endpoint, paths, timeouts); it never reads settings itself.
"""

from __future__ import annotations

import contextlib
import logging

import httpx

from ..config import DEFAULT_TEMPLATE, get_settings
from ..core.notifications import NotificationQueue
from ..core.session import TaskSession
from ..core.state import AppState
from ..editor.buffer import FileEditorBuffer
from ..remote.client import HttpTaskClient, make_timeout

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.workfile_path.parent.mkdir(parents=True, exist_ok=True)
    settings.export_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    remote = HttpTaskClient(
        settings.base_url,
        script_endpoint=settings.script_endpoint,
        timeout=make_timeout(settings.connect_timeout, settings.read_timeout),
        transport=transport,
    )
    editor = FileEditorBuffer(settings.workfile_path, DEFAULT_TEMPLATE)
    notifications = NotificationQueue(
        info_timeout=settings.notify_timeout,
        confirm_timeout=settings.confirm_timeout,
    )
    session = TaskSession(
        remote,
        editor,
        notifications,
        default_template=DEFAULT_TEMPLATE,
        export_path=settings.export_path,
    )

    logger.info("Remote service %s (endpoint=/%s)", settings.base_url, settings.script_endpoint)
    return AppState(
        settings=settings,
        remote=remote,
        editor=editor,
        notifications=notifications,
        session=session,
    )


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    for task in list(state.running):
        task.cancel()

    try:
        await state.session.drain()
    except Exception:
        logger.exception("Failed to finish background work.")

    with contextlib.suppress(Exception):
        state.notifications.clear()

    try:
        await state.remote.aclose()
    except Exception:
        logger.debug("HTTP client close failed.", exc_info=True)
