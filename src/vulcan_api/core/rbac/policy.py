"""Required roles per operation and the elevated rule-unlock capability."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vulcan_api.core.auth import Actor
from vulcan_db.models import Role, Rule

from .hierarchy import ResourceRef
from .resolver import PermissionResolver

VIEW_ROLE = Role.VIEWER
EDIT_ROLE = Role.MEMBER
MANAGE_ROLE = Role.ADMIN


@runtime_checkable
class UnlockPolicy(Protocol):
    """Decides whether an actor may clear the lock on a rule."""

    def can_unlock(self, actor: Actor, rule: Rule) -> bool: ...


class RoleUnlockPolicy:
    """Grant unlock to actors whose effective role on the rule meets ``min_role``."""

    def __init__(self, resolver: PermissionResolver, *, min_role: Role = Role.ADMIN) -> None:
        self._resolver = resolver
        self._min_role = min_role

    def can_unlock(self, actor: Actor, rule: Rule) -> bool:
        return self._resolver.effective_role(actor, ResourceRef.rule(rule.id)) >= self._min_role


__all__ = [
    "EDIT_ROLE",
    "MANAGE_ROLE",
    "VIEW_ROLE",
    "RoleUnlockPolicy",
    "UnlockPolicy",
]
