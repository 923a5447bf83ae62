"""Identity of the authenticated actor for the duration of one request."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from vulcan_db.models import User


@dataclass(frozen=True, slots=True)
class Actor:
    """Immutable identity used by every authorization decision."""

    id: UUID
    is_global_admin: bool = False

    @classmethod
    def from_user(cls, user: User) -> Actor:
        return cls(id=user.id, is_global_admin=bool(user.admin))
