"""Authorization core: resource hierarchy, role resolution, and policies."""

from .hierarchy import (
    ComponentNotFoundError,
    ProjectNotFoundError,
    ResourceHierarchy,
    ResourceRef,
    RuleNotFoundError,
)
from .policy import EDIT_ROLE, MANAGE_ROLE, VIEW_ROLE, RoleUnlockPolicy, UnlockPolicy
from .resolver import PermissionResolver

__all__ = [
    "EDIT_ROLE",
    "MANAGE_ROLE",
    "VIEW_ROLE",
    "ComponentNotFoundError",
    "PermissionResolver",
    "ProjectNotFoundError",
    "ResourceHierarchy",
    "ResourceRef",
    "RoleUnlockPolicy",
    "RuleNotFoundError",
    "UnlockPolicy",
]
