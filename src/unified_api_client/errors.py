"""
unified_api_client.errors

Error taxonomy for the client.

Responsibilities:
- One exception type per failure class callers may want to handle.
- Carry the data a UI needs (status, message, GraphQL error list).
"""

from __future__ import annotations

from typing import Any


class ApiClientError(Exception):
    """Base class for every error raised by this package."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class PreconditionError(ApiClientError):
    """An operation was called in a state where it cannot run (e.g. impersonate while logged out)."""


class NotImpersonatingError(ApiClientError):
    def __init__(self, message: str = "No original token found. Not currently impersonating.") -> None:
        super().__init__(message)


class UnauthorizedError(ApiClientError):
    """
    The API answered 401 (or auth is required and no token exists).

    `location` is where the page was (or should be) sent to log in again.
    """

    def __init__(self, location: str, message: str = "Unauthorized") -> None:
        super().__init__(message)
        self.location = location


class RemoteRejectionError(ApiClientError):
    def __init__(self, status: int, message: str, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        return f"{self.status}: {self.message}" if self.message else str(self.status)


class GraphQLError(ApiClientError):
    """GraphQL reported errors inside an otherwise successful HTTP response."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        first = errors[0].get("message", "") if errors and isinstance(errors[0], dict) else ""
        super().__init__(str(first))
        self.errors = errors


class UploadError(ApiClientError):
    def __init__(self, reason: str, status: int | None = None) -> None:
        super().__init__(reason)
        self.status = status


class TransportError(ApiClientError):
    """Network unreachable, connection dropped, or a response that could not be read."""


# --- Module Notes -----------------------------------------------------------
# `message` is what gets mirrored to the Notifier; keep it human readable.
