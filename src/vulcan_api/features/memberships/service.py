"""Membership lifecycle manager.

Creates, updates and removes membership grants on projects and components.
Every operation is gated by the permission resolver:

* create requires a *direct* admin grant on the target (or global admin);
  an admin grant inherited from the owning project is not enough,
* update and destroy require the *effective* admin role on the target.

Successful changes emit a :class:`MembershipEvent` to the notifier after the
row is flushed; validation or authorization failures emit nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import NoReturn
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vulcan_api.common.logging import log_context
from vulcan_api.core.auth import Actor
from vulcan_api.core.errors import RecordInvalidError
from vulcan_api.core.rbac import MANAGE_ROLE, VIEW_ROLE, PermissionResolver, ResourceRef
from vulcan_api.settings import NotificationSettings, Settings
from vulcan_db.models import Membership, MembershipType, Role, User

from .exceptions import MembershipNotFoundError
from .notifications import (
    MEMBERSHIP_CREATED,
    MEMBERSHIP_REMOVED,
    MEMBERSHIP_UPDATED,
    MembershipEvent,
    MembershipNotifier,
)
from .repository import MembershipsRepository
from .schemas import (
    MembershipCreate,
    MembershipListOut,
    MembershipOut,
    MembershipResult,
    MembershipTarget,
    MembershipUpdate,
)

logger = logging.getLogger(__name__)

CREATED_NOTICE = "Successfully created membership."
UPDATED_NOTICE = "Successfully updated membership."
REMOVED_NOTICE = "Successfully removed membership."
CREATE_FAILED = "Unable to create membership."
UPDATE_FAILED = "Unable to update membership."
REMOVE_FAILED = "Unable to remove membership."

_BLANK = "can't be blank"


def _manage_denied_message(ref: ResourceRef) -> str:
    return f"You are not authorized to manage permissions on this {ref.kind.value}"


class MembershipsService:
    """Lifecycle operations on membership grants."""

    def __init__(
        self,
        *,
        session: Session,
        settings: Settings,
        notifications: NotificationSettings | None = None,
        notifier: MembershipNotifier | None = None,
        resolver: PermissionResolver | None = None,
    ) -> None:
        self._session = session
        self._repo = MembershipsRepository(session)
        self._resolver = resolver or PermissionResolver(session)
        self._notifier = notifier or MembershipNotifier(notifications or settings.notifications())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_memberships(
        self,
        *,
        membership_type: MembershipType,
        target_id: UUID,
        actor: Actor,
    ) -> MembershipListOut:
        target = ResourceRef.for_membership(MembershipType(membership_type), target_id)
        self._resolver.hierarchy.find(target)
        self._resolver.authorize(actor, target, VIEW_ROLE)
        memberships = self._repo.list_for_target(
            membership_type=MembershipType(membership_type),
            target_id=target_id,
        )
        return MembershipListOut(
            target=_target_out(target),
            items=[MembershipOut.model_validate(item) for item in memberships],
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_membership(self, *, payload: MembershipCreate, actor: Actor) -> MembershipResult:
        missing = {
            field: [_BLANK]
            for field in ("membership_type", "membership_id", "user_id", "role")
            if getattr(payload, field) is None
        }
        if missing:
            self._invalid("create", actor, missing, summary=CREATE_FAILED)

        membership_type = MembershipType(payload.membership_type)
        role = Role(payload.role)
        target = ResourceRef.for_membership(membership_type, payload.membership_id)
        self._resolver.authorize_direct(
            actor,
            target,
            MANAGE_ROLE,
            message=_manage_denied_message(target),
        )

        errors: dict[str, list[str]] = {}
        if self._session.get(User, payload.user_id) is None:
            errors["user"] = ["must exist"]
        if not self._resolver.hierarchy.exists(target):
            errors["membership"] = ["must exist"]
        if not errors and self._repo.find_for(
            user_id=payload.user_id,
            membership_type=membership_type,
            target_id=payload.membership_id,
        ):
            errors["user"] = ["has already been taken"]
        if errors:
            self._invalid("create", actor, errors, summary=CREATE_FAILED, target=target)

        membership = Membership(
            user_id=payload.user_id,
            membership_type=membership_type,
            membership_id=payload.membership_id,
            role=role,
        )
        try:
            self._repo.add(membership)
        except IntegrityError:
            # Lost a race with a concurrent grant for the same user and target.
            self._session.rollback()
            self._invalid(
                "create",
                actor,
                {"user": ["has already been taken"]},
                summary=CREATE_FAILED,
                target=target,
            )

        logger.info(
            "membership.create.success",
            extra=self._audit(actor, membership),
        )
        self._emit(MEMBERSHIP_CREATED, membership, actor)
        return MembershipResult(
            notice=CREATED_NOTICE,
            membership=MembershipOut.model_validate(membership),
            target=_target_out(target),
        )

    def update_membership(
        self,
        *,
        membership_id: UUID,
        payload: MembershipUpdate,
        actor: Actor,
    ) -> MembershipResult:
        membership = self._require(membership_id)
        target = _target_of(membership)
        self._resolver.authorize(
            actor,
            target,
            MANAGE_ROLE,
            message=_manage_denied_message(target),
        )

        if payload.role is None:
            self._invalid("update", actor, {"role": [_BLANK]}, summary=UPDATE_FAILED, target=target)

        previous_role = Role(membership.role)
        membership.role = Role(payload.role)
        self._repo.save(membership)

        logger.info(
            "membership.update.success",
            extra=self._audit(actor, membership, previous_role=previous_role.value),
        )
        self._emit(MEMBERSHIP_UPDATED, membership, actor)
        return MembershipResult(
            notice=UPDATED_NOTICE,
            membership=MembershipOut.model_validate(membership),
            target=_target_out(target),
        )

    def delete_membership(self, *, membership_id: UUID, actor: Actor) -> MembershipResult:
        membership = self._require(membership_id)
        target = _target_of(membership)
        self._resolver.authorize(
            actor,
            target,
            MANAGE_ROLE,
            message=_manage_denied_message(target),
        )

        snapshot = MembershipOut.model_validate(membership)
        event = MembershipEvent.from_membership(MEMBERSHIP_REMOVED, membership, actor_id=actor.id)
        try:
            self._repo.delete(membership)
        except IntegrityError as exc:
            self._session.rollback()
            logger.warning(
                "membership.destroy.invalid",
                extra=log_context(user_id=actor.id, membership_id=membership_id),
            )
            raise RecordInvalidError({"base": [str(exc.orig)]}, summary=REMOVE_FAILED) from exc

        logger.info(
            "membership.destroy.success",
            extra=log_context(
                user_id=actor.id,
                membership_id=membership_id,
                membership_type=target.kind.value,
                target_id=str(target.id),
                member_id=str(snapshot.user_id),
            ),
        )
        self._notifier.dispatch(event)
        return MembershipResult(
            notice=REMOVED_NOTICE,
            membership=snapshot,
            target=_target_out(target),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(self, membership_id: UUID) -> Membership:
        membership = self._repo.get(membership_id)
        if membership is None:
            raise MembershipNotFoundError(membership_id)
        return membership

    def _emit(self, name: str, membership: Membership, actor: Actor) -> None:
        self._notifier.dispatch(MembershipEvent.from_membership(name, membership, actor_id=actor.id))

    def _invalid(
        self,
        operation: str,
        actor: Actor,
        field_errors: Mapping[str, Sequence[str]],
        *,
        summary: str,
        target: ResourceRef | None = None,
    ) -> NoReturn:
        logger.info(
            f"membership.{operation}.invalid",
            extra=log_context(
                user_id=actor.id,
                fields=sorted(field_errors),
                target_id=str(target.id) if target else None,
            ),
        )
        raise RecordInvalidError(field_errors, summary=summary)

    @staticmethod
    def _audit(actor: Actor, membership: Membership, **extra: object) -> dict[str, object]:
        return log_context(
            user_id=actor.id,
            membership_id=membership.id,
            membership_type=MembershipType(membership.membership_type).value,
            target_id=str(membership.membership_id),
            member_id=str(membership.user_id),
            role=Role(membership.role).value,
            **extra,
        )


def _target_of(membership: Membership) -> ResourceRef:
    return ResourceRef.for_membership(
        MembershipType(membership.membership_type),
        membership.membership_id,
    )


def _target_out(ref: ResourceRef) -> MembershipTarget:
    return MembershipTarget(kind=MembershipType(ref.kind.value), id=ref.id)


__all__ = [
    "CREATED_NOTICE",
    "CREATE_FAILED",
    "REMOVED_NOTICE",
    "REMOVE_FAILED",
    "UPDATED_NOTICE",
    "UPDATE_FAILED",
    "MembershipsService",
]
