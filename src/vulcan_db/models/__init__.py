"""ORM models for users, the resource hierarchy, and membership grants."""

from .enums import MembershipType, ResourceKind, Role
from .membership import Membership
from .resources import Component, Project, Rule
from .user import User

__all__ = [
    "Component",
    "Membership",
    "MembershipType",
    "Project",
    "ResourceKind",
    "Role",
    "Rule",
    "User",
]
