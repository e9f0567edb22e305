# src/scriptdesk/remote/client.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from ..core.errors import NetworkError, NotFound, ParseError, RemoteError, ValidationError
from ..core.ports import ExecuteResult

logger = logging.getLogger(__name__)

IMPORT_PATH = "/manage/import"
EXPORT_PATH = "/manage/export"


def make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(
        connect=connect_s,
        read=read_s,
        write=max(10.0, connect_s),
        pool=connect_s,
    )


def _quote_name(name: str) -> str:
    return quote(name, safe="")


def _decode_object(resp: httpx.Response) -> dict[str, Any]:
    """Parse a response body that must be a JSON object."""
    try:
        data = resp.json()
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
        raise ParseError(resp.status_code, f"Unexpected response body from {resp.request.url.path}") from e
    if not isinstance(data, dict):
        raise ParseError(resp.status_code, f"Expected a JSON object from {resp.request.url.path}")
    return data


def _error_detail(resp: httpx.Response) -> str:
    """Best-effort: the server reports failures as {"error": "..."}."""
    try:
        data = resp.json()
    except Exception:
        data = None
    if isinstance(data, dict):
        detail = data.get("error")
        if isinstance(detail, str) and detail.strip():
            return detail.strip()
    return f"HTTP error! Status: {resp.status_code}"


def _raise_for_status(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    detail = _error_detail(resp)
    if resp.status_code == 404:
        raise NotFound(404, detail)
    raise NetworkError(resp.status_code, detail)


class HttpTaskClient:
    """
    Remote task operations over HTTP.

    IMPORTANT:
    - One request per call, no retries: a failure is terminal for that call.
    - Every request failure surfaces as a RemoteError subclass (NetworkError/ParseError/NotFound).
    - An unreadable local bundle is a ValidationError; no request is made.
    - The execute endpoint prefix is injected here, never read from globals.
    """

    def __init__(
        self,
        base_url: str,
        *,
        script_endpoint: str = "scripts",
        timeout: httpx.Timeout | float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._script_endpoint = (script_endpoint or "scripts").strip("/") or "scripts"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout if timeout is not None else make_timeout(5.0, 60.0),
            transport=transport,
        )

    @property
    def script_endpoint(self) -> str:
        return self._script_endpoint

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpTaskClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ---- low-level helpers ----

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.info("%s %s timed out", method, url)
            raise NetworkError(0, f"Request timed out: {method} {url}") from e
        except httpx.TransportError as e:
            logger.info("%s %s transport error: %s", method, url, e.__class__.__name__)
            raise NetworkError(0, f"Network error: {e}") from e
        logger.debug("%s %s -> %s", method, url, resp.status_code)
        return resp

    async def _json(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        resp = await self._request(method, url, **kwargs)
        _raise_for_status(resp)
        return _decode_object(resp)

    # ---- task operations ----

    async def list_names(self) -> list[str]:
        data = await self._json("GET", "/scripts")
        tasks = data.get("tasks") or []
        if not isinstance(tasks, list):
            raise ParseError(200, "Expected 'tasks' to be a list")
        return [str(t) for t in tasks]

    async def get(self, name: str) -> str:
        data = await self._json("GET", f"/scripts/{_quote_name(name)}")
        code = data.get("code")
        if code is None:
            return ""
        if not isinstance(code, str):
            raise ParseError(200, f"Expected 'code' to be a string for {name}")
        return code

    async def put(self, name: str, code: str) -> dict[str, Any]:
        return await self._json("POST", f"/scripts/{_quote_name(name)}", json={"name": name, "code": code})

    async def remove(self, name: str) -> dict[str, Any]:
        return await self._json("DELETE", f"/scripts/{_quote_name(name)}")

    def execute_url(self, name: str) -> str:
        return f"{self._base_url}/{self._script_endpoint}/{_quote_name(name)}"

    async def execute(self, name: str) -> ExecuteResult:
        """
        Run a task and wait for its terminal result (no streaming).

        The body is parsed before the status check: a failed run still reports
        its "error" field, which is more useful than the bare status code.
        """
        resp = await self._request("GET", f"/{self._script_endpoint}/{_quote_name(name)}")
        data = _decode_object(resp)

        error = data.get("error")
        error_s = str(error).strip() if error not in (None, "") else None

        if not resp.is_success:
            detail = error_s or f"HTTP error! Status: {resp.status_code}"
            if resp.status_code == 404:
                raise NotFound(404, detail)
            raise NetworkError(resp.status_code, detail)

        output = data.get("output")
        console = data.get("console")
        if isinstance(console, str):
            console_lines = console.splitlines()
        elif isinstance(console, list):
            console_lines = [str(c) for c in console]
        else:
            console_lines = []

        return ExecuteResult(
            output=str(output) if output not in (None, "") else None,
            console=console_lines,
            error=error_s,
        )

    # ---- bulk operations ----

    async def import_bundle(self, path: Path) -> str:
        path = Path(path)
        try:
            payload = path.read_bytes()
        except OSError as e:
            raise ValidationError(f"Cannot read {path}: {e.strerror or e}") from e

        files = {"file": (path.name, payload, "application/zip")}
        data = await self._json("POST", IMPORT_PATH, files=files)
        message = data.get("message")
        return str(message) if message else f"Imported {path.name}"

    async def export_bundle(self, dest: Path) -> Path:
        """Stream the export archive into dest (written atomically)."""
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        tmp = dest.with_suffix(dest.suffix + ".part")

        try:
            async with self._client.stream("GET", EXPORT_PATH) as resp:
                if not resp.is_success:
                    await resp.aread()
                    _raise_for_status(resp)
                with tmp.open("wb") as fh:
                    async for chunk in resp.aiter_bytes():
                        fh.write(chunk)
        except httpx.TransportError as e:
            tmp.unlink(missing_ok=True)
            raise NetworkError(0, f"Network error: {e}") from e
        except RemoteError:
            tmp.unlink(missing_ok=True)
            raise

        os.replace(tmp, dest)
        logger.info("Export saved to %s", dest)
        return dest
