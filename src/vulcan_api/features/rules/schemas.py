"""Pydantic schemas for rule endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from vulcan_api.common.schema import BaseSchema


class _RuleContent(BaseSchema):
    title: str | None = None
    status: str | None = Field(default=None, max_length=64)
    rule_severity: str | None = Field(default=None, max_length=32)
    fixtext: str | None = None
    check_content: str | None = None
    vuln_discussion: str | None = None


class RuleCreate(_RuleContent):
    """Payload for adding a rule to a component."""

    rule_id: str = Field(min_length=1, max_length=64)

    @field_validator("rule_id")
    @classmethod
    def _strip_rule_id(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("rule_id must not be blank")
        return cleaned


class RuleUpdate(_RuleContent):
    """Partial update of rule content. The lock flag is not writable here."""

    rule_id: str | None = Field(default=None, min_length=1, max_length=64)


class RuleOut(BaseSchema):
    id: UUID
    component_id: UUID
    rule_id: str
    title: str | None = None
    status: str
    rule_severity: str | None = None
    fixtext: str | None = None
    check_content: str | None = None
    vuln_discussion: str | None = None
    locked: bool
    created_at: datetime
    updated_at: datetime


class RuleListOut(BaseSchema):
    items: list[RuleOut]


__all__ = ["RuleCreate", "RuleListOut", "RuleOut", "RuleUpdate"]
