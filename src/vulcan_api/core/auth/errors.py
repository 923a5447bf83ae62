"""Shared auth/permission error types."""

from __future__ import annotations

from vulcan_db.models import ResourceKind


class AuthenticationError(Exception):
    """Raised when a request cannot be attributed to an active user."""


class NotAuthorizedError(Exception):
    """Raised when an actor lacks the role an operation requires.

    Always fatal to the current operation; the message names the resource kind.
    """

    def __init__(self, resource_kind: ResourceKind | str, message: str | None = None) -> None:
        kind = ResourceKind(resource_kind).value
        self.resource_kind = kind
        super().__init__(message or f"You are not authorized to access this {kind}")
