"""Pydantic schemas for membership endpoints.

Request bodies may arrive wrapped in a ``{"membership": {...}}`` envelope (the
shape the browser forms submit) or as the bare object.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import field_validator, model_validator

from vulcan_api.common.schema import BaseSchema
from vulcan_db.models import MembershipType, Role


def _unwrap_envelope(data: Any) -> Any:
    if isinstance(data, dict) and isinstance(data.get("membership"), dict):
        return data["membership"]
    return data


def _reject_bottom_role(value: Role | None) -> Role | None:
    # use_enum_values hands validators the plain value, so compare by equality.
    if value == Role.NONE:
        raise ValueError("role must be one of: " + ", ".join(r.value for r in Role.grantable()))
    return value


class MembershipCreate(BaseSchema):
    """Grant ``role`` on a project or component to ``user_id``.

    Fields are optional at the schema level so that missing values surface as
    field errors from the lifecycle manager rather than request-shape errors.
    """

    membership_type: MembershipType | None = None
    membership_id: UUID | None = None
    user_id: UUID | None = None
    role: Role | None = None

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, data: Any) -> Any:
        return _unwrap_envelope(data)

    @field_validator("role")
    @classmethod
    def _grantable_role(cls, value: Role | None) -> Role | None:
        return _reject_bottom_role(value)


class MembershipUpdate(BaseSchema):
    role: Role | None = None

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, data: Any) -> Any:
        return _unwrap_envelope(data)

    @field_validator("role")
    @classmethod
    def _grantable_role(cls, value: Role | None) -> Role | None:
        return _reject_bottom_role(value)


class MembershipOut(BaseSchema):
    id: UUID
    user_id: UUID
    membership_type: MembershipType
    membership_id: UUID
    role: Role
    created_at: datetime
    updated_at: datetime


class MembershipTarget(BaseSchema):
    """The project or component a membership grants access to."""

    kind: MembershipType
    id: UUID


class MembershipResult(BaseSchema):
    notice: str
    membership: MembershipOut
    target: MembershipTarget


class MembershipListOut(BaseSchema):
    target: MembershipTarget
    items: list[MembershipOut]


__all__ = [
    "MembershipCreate",
    "MembershipListOut",
    "MembershipOut",
    "MembershipResult",
    "MembershipTarget",
    "MembershipUpdate",
]
