"""Enumerations shared by the ORM models and the authorization core."""

from __future__ import annotations

from enum import Enum


def enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class ResourceKind(str, Enum):
    """Kinds of resource in the containment hierarchy."""

    PROJECT = "Project"
    COMPONENT = "Component"
    RULE = "Rule"


class MembershipType(str, Enum):
    """Resource kinds that can carry membership grants."""

    PROJECT = "Project"
    COMPONENT = "Component"

    @property
    def resource_kind(self) -> ResourceKind:
        return ResourceKind(self.value)


class Role(str, Enum):
    """Ordered membership roles.

    ``NONE`` is the bottom returned when an actor holds no grant; it is never
    stored on a membership row.
    """

    NONE = "none"
    VIEWER = "viewer"
    MEMBER = "member"
    REVIEWER = "reviewer"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _ROLE_RANKS[self]

    @classmethod
    def grantable(cls) -> tuple[Role, ...]:
        return tuple(role for role in cls if role is not cls.NONE)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank >= other.rank


_ROLE_RANKS: dict[Role, int] = {
    Role.NONE: 0,
    Role.VIEWER: 10,
    Role.MEMBER: 20,
    Role.REVIEWER: 30,
    Role.ADMIN: 40,
}


__all__ = ["MembershipType", "ResourceKind", "Role", "enum_values"]
