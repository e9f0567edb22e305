# src/scriptdesk/editor/buffer.py

"""
Editor buffer adapters.

The session only needs get/set/layout. Both adapters share the readiness rule:
calls made before the editor reports ready are held and replayed on mark_ready(),
never dropped.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import shutil
from pathlib import Path

from ..config import DEFAULT_TEMPLATE

logger = logging.getLogger(__name__)


class _BufferBase:
    def __init__(self, initial_text: str = DEFAULT_TEMPLATE) -> None:
        self._ready = False
        self._ready_event: asyncio.Event | None = None
        self._pending_text: str | None = initial_text
        self._pending_layout = False
        self.layout_count = 0

    @property
    def ready(self) -> bool:
        return self._ready

    async def wait_ready(self) -> None:
        if self._ready:
            return
        if self._ready_event is None:
            self._ready_event = asyncio.Event()
        await self._ready_event.wait()

    def mark_ready(self) -> None:
        if self._ready:
            return
        self._ready = True

        if self._pending_text is not None:
            text, self._pending_text = self._pending_text, None
            self._write(text)
        if self._pending_layout:
            self._pending_layout = False
            self._layout()

        if self._ready_event is not None:
            self._ready_event.set()
        logger.debug("%s ready", self.__class__.__name__)

    def get_text(self) -> str:
        if not self._ready:
            return self._pending_text if self._pending_text is not None else ""
        return self._read()

    def set_text(self, text: str) -> None:
        if not self._ready:
            self._pending_text = text
            return
        self._write(text)

    def request_layout(self) -> None:
        if not self._ready:
            self._pending_layout = True
            return
        self._layout()

    # ---- backend hooks ----

    def _read(self) -> str:
        raise NotImplementedError

    def _write(self, text: str) -> None:
        raise NotImplementedError

    def _layout(self) -> None:
        self.layout_count += 1


class MemoryEditorBuffer(_BufferBase):
    """In-process buffer. Starts not-ready unless ready=True is passed."""

    def __init__(self, initial_text: str = DEFAULT_TEMPLATE, *, ready: bool = False) -> None:
        super().__init__(initial_text)
        self._text = ""
        if ready:
            self.mark_ready()

    def _read(self) -> str:
        return self._text

    def _write(self, text: str) -> None:
        self._text = text


class FileEditorBuffer(_BufferBase):
    """
    Buffer backed by a working file that the user edits with an external editor.

    Becomes ready once the working directory exists (see open()).
    """

    def __init__(self, path: str | Path, initial_text: str = DEFAULT_TEMPLATE) -> None:
        super().__init__(initial_text)
        self.path = Path(path)
        self.columns = 80

    def open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.mark_ready()

    def _read(self) -> str:
        try:
            return self.path.read_text("utf-8")
        except FileNotFoundError:
            return ""

    def _write(self, text: str) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(text, "utf-8")
        os.replace(tmp, self.path)

    def _layout(self) -> None:
        super()._layout()
        with contextlib.suppress(Exception):
            self.columns = shutil.get_terminal_size((80, 24)).columns

    def preview(self, max_lines: int = 40) -> str:
        """Numbered listing of the buffer, clipped to the current terminal width."""
        width = max(20, self.columns - 7)
        lines = self.get_text().splitlines()
        out = [f"{i:>4} | {line[:width]}" for i, line in enumerate(lines[:max_lines], start=1)]
        if len(lines) > max_lines:
            out.append(f"     ... {len(lines) - max_lines} more lines")
        return "\n".join(out)
