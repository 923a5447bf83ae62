"""Membership-specific exceptions."""

from __future__ import annotations

from vulcan_api.core.errors import ResourceNotFoundError


class MembershipNotFoundError(ResourceNotFoundError):
    kind = "Membership"


__all__ = ["MembershipNotFoundError"]
