"""
scriptdesk: console client for a remote task-script service.

Components:
- core/notifications.py: transient notifications and confirmations
- core/session.py: task session state machine (select/save/run/delete/import/export)
- remote/client.py: HTTP client for the remote service
- editor/buffer.py: editor buffer adapters
- cli/ + connectors/: console front-end
"""

__version__ = "0.1.0"
