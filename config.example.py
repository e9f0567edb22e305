# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "SCRIPTDESK_APP_NAME": "App display name (default: scriptdesk).",
    "SCRIPTDESK_LOG_LEVEL": "Console logging level (default: INFO).",
    # Remote service
    "SCRIPTDESK_BASE_URL": "Root URL of the task-script service (default: http://127.0.0.1:8080).",
    "SCRIPTDESK_SCRIPT_ENDPOINT": "Path prefix used to run/browse a task (default: scripts).",
    "SCRIPTDESK_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5).",
    "SCRIPTDESK_READ_TIMEOUT_SECONDS": "HTTP read timeout; runs block until done (default: 60).",
    # Notifications
    "SCRIPTDESK_NOTIFY_TIMEOUT_SECONDS": "Lifetime of a notification (default: 5).",
    "SCRIPTDESK_CONFIRM_TIMEOUT_SECONDS": "Lifetime of a delete confirmation (default: 10).",
    # Paths (gitignored)
    "SCRIPTDESK_DATA_DIR": "Local data directory (default: .local/scriptdesk).",
    "SCRIPTDESK_WORKFILE_PATH": "Working file edited with /edit (default: <data_dir>/current.js).",
    "SCRIPTDESK_EXPORT_PATH": "Where /export writes the archive (default: <data_dir>/task-scripts.zip).",
    # Editing
    "SCRIPTDESK_EDITOR": "Editor command for /edit (falls back to $VISUAL, $EDITOR, then vi).",
}
