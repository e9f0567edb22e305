# src/scriptdesk/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is required at import time; every value has a usable default.
- The core never reads settings itself: bootstrap passes explicit values in.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "SCRIPTDESK"

DEFAULT_TEMPLATE = "// JavaScript task script\n\n"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Remote service ----
    base_url: str
    script_endpoint: str
    connect_timeout: float
    read_timeout: float

    # ---- Notifications ----
    notify_timeout: float
    confirm_timeout: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    workfile_path: Path
    export_path: Path

    # ---- Console editing ----
    editor_command: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "scriptdesk").strip() or "scriptdesk"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        base_url = (_env(_k("BASE_URL"), "http://127.0.0.1:8080").strip() or "http://127.0.0.1:8080").rstrip("/")
        # Execute/browse prefix exposed by the server; "scripts" unless the deployment renames it.
        script_endpoint = _env(_k("SCRIPT_ENDPOINT"), "scripts").strip().strip("/") or "scripts"

        connect_timeout = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("READ_TIMEOUT_SECONDS"), 60.0)

        notify_timeout = _env_float(_k("NOTIFY_TIMEOUT_SECONDS"), 5.0)
        confirm_timeout = _env_float(_k("CONFIRM_TIMEOUT_SECONDS"), 10.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/scriptdesk"))
        workfile_path = _env_path(_k("WORKFILE_PATH"), data_dir / "current.js")
        export_path = _env_path(_k("EXPORT_PATH"), data_dir / "task-scripts.zip")

        editor_command = (_first_env(_k("EDITOR"), "VISUAL", "EDITOR", default="vi") or "vi").strip()

        return Settings(
            app_name=app_name,
            log_level=log_level,
            base_url=base_url,
            script_endpoint=script_endpoint,
            connect_timeout=connect_timeout,
            read_timeout=max(read_timeout, connect_timeout),
            notify_timeout=notify_timeout,
            confirm_timeout=confirm_timeout,
            data_dir=data_dir,
            workfile_path=workfile_path,
            export_path=export_path,
            editor_command=editor_command,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
