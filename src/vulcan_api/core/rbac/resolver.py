"""Effective-role resolution and the authorization gate."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from vulcan_api.common.logging import log_context
from vulcan_api.core.auth import Actor, NotAuthorizedError
from vulcan_db.models import Membership, Role

from .hierarchy import ResourceHierarchy, ResourceRef

logger = logging.getLogger(__name__)


class PermissionResolver:
    """Compute an actor's role on a resource from global admin status and grants."""

    def __init__(self, session: Session, hierarchy: ResourceHierarchy | None = None) -> None:
        self._session = session
        self._hierarchy = hierarchy or ResourceHierarchy(session)

    @property
    def hierarchy(self) -> ResourceHierarchy:
        return self._hierarchy

    def effective_role(self, actor: Actor, resource: ResourceRef) -> Role:
        """Highest role granted on ``resource`` or any ancestor; never raises."""

        if actor.is_global_admin:
            return Role.ADMIN
        chain = self._hierarchy.grant_chain(resource)
        return self._highest_role(actor.id, chain)

    def direct_role(self, actor: Actor, resource: ResourceRef) -> Role:
        """Role from grants on exactly ``resource``, ignoring inheritance."""

        if actor.is_global_admin:
            return Role.ADMIN
        if resource.membership_type is None or not self._hierarchy.exists(resource):
            return Role.NONE
        return self._highest_role(actor.id, [resource])

    def authorize(
        self,
        actor: Actor,
        resource: ResourceRef,
        required: Role,
        *,
        message: str | None = None,
    ) -> Role:
        role = self.effective_role(actor, resource)
        self._check(actor, resource, role, required, message=message, inherited=True)
        return role

    def authorize_direct(
        self,
        actor: Actor,
        resource: ResourceRef,
        required: Role,
        *,
        message: str | None = None,
    ) -> Role:
        role = self.direct_role(actor, resource)
        self._check(actor, resource, role, required, message=message, inherited=False)
        return role

    def _check(
        self,
        actor: Actor,
        resource: ResourceRef,
        role: Role,
        required: Role,
        *,
        message: str | None,
        inherited: bool,
    ) -> None:
        if role >= required:
            return
        logger.warning(
            "authz.denied",
            extra=log_context(
                user_id=actor.id,
                resource_kind=resource.kind.value,
                resource_id=str(resource.id),
                role=role.value,
                required=required.value,
                inherited=inherited,
            ),
        )
        raise NotAuthorizedError(resource.kind, message)

    def _highest_role(self, user_id: UUID, refs: Sequence[ResourceRef]) -> Role:
        # Duplicate grants for one (user, resource) pair resolve to the highest role.
        if not refs:
            return Role.NONE
        targets = [
            and_(
                Membership.membership_type == ref.membership_type,
                Membership.membership_id == ref.id,
            )
            for ref in refs
        ]
        stmt = select(Membership.role).where(Membership.user_id == user_id, or_(*targets))
        roles = self._session.scalars(stmt).all()
        return max(roles, default=Role.NONE)


__all__ = ["PermissionResolver"]
