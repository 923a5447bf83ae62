"""Domain errors shared by the authorization core and its features."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from uuid import UUID


class ResourceNotFoundError(Exception):
    """Raised when a referenced record does not exist."""

    kind = "Resource"

    def __init__(self, record_id: UUID | str) -> None:
        self.record_id = str(record_id)
        super().__init__(f"{self.kind} {self.record_id!r} not found")


class RecordInvalidError(Exception):
    """Raised when a record fails validation at the persistence boundary.

    ``field_errors`` maps a field name to its messages; ``full_messages``
    renders them as sentences ("Role can't be blank").
    """

    def __init__(
        self,
        field_errors: Mapping[str, Sequence[str]],
        *,
        summary: str | None = None,
    ) -> None:
        self.field_errors = {field: list(messages) for field, messages in field_errors.items()}
        self.summary = summary
        message = "; ".join(self.full_messages) or "Record is invalid"
        if summary:
            message = f"{summary} {message}"
        super().__init__(message)

    @property
    def full_messages(self) -> list[str]:
        messages: list[str] = []
        for field, field_messages in self.field_errors.items():
            label = field.replace("_", " ").capitalize()
            messages.extend(f"{label} {message}" for message in field_messages)
        return messages


class RuleLockedError(Exception):
    """Raised when an update or destroy targets a locked rule."""

    def __init__(self, rule_id: UUID | str) -> None:
        self.rule_id = str(rule_id)
        super().__init__(
            "This control is locked and must first be unlocked if changes are required."
        )


__all__ = ["RecordInvalidError", "ResourceNotFoundError", "RuleLockedError"]
