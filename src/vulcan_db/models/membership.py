"""Membership grants: (user, project-or-component, role) triples."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Index, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vulcan_db import GUID, Base, TimestampMixin, UUIDPrimaryKeyMixin

from .enums import MembershipType, Role, enum_values

if TYPE_CHECKING:
    from .user import User

membership_type_enum = SAEnum(
    MembershipType,
    name="membership_type",
    native_enum=False,
    length=20,
    values_callable=enum_values,
)

membership_role_enum = SAEnum(
    Role,
    name="membership_role",
    native_enum=False,
    length=20,
    values_callable=enum_values,
)


class Membership(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Grant of ``role`` to a user on a project or component.

    ``membership_id`` is polymorphic over ``membership_type`` and carries no
    foreign key; a grant whose target no longer exists simply never matches.
    """

    __tablename__ = "memberships"

    user_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    membership_type: Mapped[MembershipType] = mapped_column(
        membership_type_enum,
        nullable=False,
    )
    membership_id: Mapped[UUID] = mapped_column(GUID(), nullable=False)
    role: Mapped[Role] = mapped_column(membership_role_enum, nullable=False)

    user: Mapped[User] = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "membership_type",
            "membership_id",
            name="uq_memberships_user_target",
        ),
        Index("ix_memberships_target", "membership_type", "membership_id"),
        Index("ix_memberships_user_id", "user_id"),
    )


__all__ = ["Membership", "membership_role_enum", "membership_type_enum"]
