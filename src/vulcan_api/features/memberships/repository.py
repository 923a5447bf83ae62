"""Persistence helpers for membership grants."""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from vulcan_db.models import Membership, MembershipType


class MembershipsRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, membership_id: UUID) -> Membership | None:
        return self._session.get(Membership, membership_id)

    def find_for(
        self,
        *,
        user_id: UUID,
        membership_type: MembershipType,
        target_id: UUID,
    ) -> Membership | None:
        stmt = (
            select(Membership)
            .where(
                Membership.user_id == user_id,
                Membership.membership_type == membership_type,
                Membership.membership_id == target_id,
            )
            .limit(1)
        )
        return self._session.scalars(stmt).first()

    def list_for_target(
        self,
        *,
        membership_type: MembershipType,
        target_id: UUID,
    ) -> Sequence[Membership]:
        stmt = (
            select(Membership)
            .where(
                Membership.membership_type == membership_type,
                Membership.membership_id == target_id,
            )
            .order_by(Membership.created_at, Membership.id)
        )
        return self._session.scalars(stmt).all()

    def add(self, membership: Membership) -> Membership:
        self._session.add(membership)
        self._session.flush([membership])
        return membership

    def save(self, membership: Membership) -> Membership:
        self._session.flush([membership])
        return membership

    def delete(self, membership: Membership) -> None:
        self._session.delete(membership)
        self._session.flush()


__all__ = ["MembershipsRepository"]
