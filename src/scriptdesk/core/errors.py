# src/scriptdesk/core/errors.py

"""
Error taxonomy.

Everything the remote client raises is a RemoteError carrying (status_code, message),
so callers can handle one type and still branch on the subclass when they care:

- NetworkError: transport failed, or the server answered with a non-success status
- ParseError:   the body is not the structured payload we expected
- NotFound:     the server does not know the referenced task (HTTP 404)

ValidationError is raised locally, before any request is made.
"""

from __future__ import annotations


class ScriptDeskError(Exception):
    """Base class for all errors raised by scriptdesk."""


class ValidationError(ScriptDeskError):
    pass


class RemoteError(ScriptDeskError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = int(status_code)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status_code={self.status_code}, message={self.message!r})"


class NetworkError(RemoteError):
    pass


class ParseError(RemoteError):
    pass


class NotFound(RemoteError):
    pass
