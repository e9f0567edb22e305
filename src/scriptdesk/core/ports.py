# src/scriptdesk/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The session depends on Protocols instead of concrete implementations.
This keeps the HTTP client and the editor swappable and makes testing easier.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol


@dataclass(slots=True, frozen=True)
class ExecuteResult:
    """Terminal result of one remote execution."""

    output: str | None = None
    console: list[str] = field(default_factory=list)
    error: str | None = None


class TaskRemote(Protocol):
    """
    Remote storage/execution service for task scripts.

    Every call is a single request/response. Failures raise RemoteError subclasses.
    """

    async def list_names(self) -> list[str]: ...
    async def get(self, name: str) -> str: ...
    async def put(self, name: str, code: str) -> dict[str, Any]: ...
    async def remove(self, name: str) -> dict[str, Any]: ...
    async def execute(self, name: str) -> ExecuteResult: ...
    async def import_bundle(self, path: Path) -> str: ...
    async def export_bundle(self, dest: Path) -> Path: ...
    def execute_url(self, name: str) -> str: ...


class EditorBuffer(Protocol):
    """
    Minimal contract over the code-editing widget.

    Calls made before the widget is ready are deferred, never dropped.
    """

    @property
    def ready(self) -> bool: ...

    async def wait_ready(self) -> None: ...
    def get_text(self) -> str: ...
    def set_text(self, text: str) -> None: ...
    def request_layout(self) -> None: ...
