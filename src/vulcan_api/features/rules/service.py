"""Rule domain service: authorization, lock guard, and conditional writes."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from vulcan_api.common.logging import log_context
from vulcan_api.core.auth import Actor
from vulcan_api.core.errors import RecordInvalidError
from vulcan_api.core.rbac import (
    EDIT_ROLE,
    VIEW_ROLE,
    PermissionResolver,
    ResourceRef,
    RoleUnlockPolicy,
    UnlockPolicy,
)
from vulcan_api.settings import Settings
from vulcan_db.models import Rule

from . import lock_guard
from .exceptions import RuleLockedError, RuleNotFoundError
from .repository import RulesRepository
from .schemas import RuleCreate, RuleListOut, RuleOut, RuleUpdate

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("rule_id", "status")


class RulesService:
    """Read and mutate rules on behalf of an actor."""

    def __init__(
        self,
        *,
        session: Session,
        settings: Settings,
        resolver: PermissionResolver | None = None,
        unlock_policy: UnlockPolicy | None = None,
    ) -> None:
        self._session = session
        self._repo = RulesRepository(session)
        self._resolver = resolver or PermissionResolver(session)
        self._unlock_policy = unlock_policy or RoleUnlockPolicy(
            self._resolver,
            min_role=settings.rule_unlock_min_role,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_rule(self, *, rule_id: UUID, actor: Actor) -> RuleOut:
        rule = self._require_rule(rule_id)
        self._resolver.authorize(actor, ResourceRef.rule(rule.id), VIEW_ROLE)
        return RuleOut.model_validate(rule)

    def list_rules(self, *, component_id: UUID, actor: Actor) -> RuleListOut:
        component_ref = ResourceRef.component(component_id)
        self._resolver.hierarchy.find(component_ref)
        self._resolver.authorize(actor, component_ref, VIEW_ROLE)
        stmt = select(Rule).where(Rule.component_id == component_id).order_by(Rule.rule_id)
        rules = self._session.scalars(stmt).all()
        return RuleListOut(items=[RuleOut.model_validate(rule) for rule in rules])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_rule(self, *, component_id: UUID, payload: RuleCreate, actor: Actor) -> RuleOut:
        component_ref = ResourceRef.component(component_id)
        self._resolver.hierarchy.find(component_ref)
        self._resolver.authorize(actor, component_ref, EDIT_ROLE)

        rule = Rule(
            component_id=component_id,
            locked=False,
            **payload.model_dump(exclude_none=True),
        )
        self._repo.add(rule)
        logger.info(
            "rule.create.success",
            extra=log_context(user_id=actor.id, component_id=component_id, rule_id=rule.id),
        )
        return RuleOut.model_validate(rule)

    def update_rule(self, *, rule_id: UUID, payload: RuleUpdate, actor: Actor) -> RuleOut:
        rule = self._require_rule(rule_id)
        self._guard_lock(rule, actor, operation="update")
        self._resolver.authorize(actor, ResourceRef.rule(rule.id), EDIT_ROLE)

        values = self._validated_changes(payload)
        if values and not self._repo.update_unlocked(rule.id, values):
            self._raise_lost_write(rule.id, actor, operation="update")

        updated = self._repo.reload(rule.id)
        if updated is None:
            raise RuleNotFoundError(rule_id)
        logger.info(
            "rule.update.success",
            extra=log_context(user_id=actor.id, rule_id=rule.id, fields=sorted(values)),
        )
        return RuleOut.model_validate(updated)

    def delete_rule(self, *, rule_id: UUID, actor: Actor) -> None:
        rule = self._require_rule(rule_id)
        self._guard_lock(rule, actor, operation="destroy")
        self._resolver.authorize(actor, ResourceRef.rule(rule.id), EDIT_ROLE)

        if not self._repo.delete_unlocked(rule.id):
            self._raise_lost_write(rule.id, actor, operation="destroy")
        logger.info(
            "rule.destroy.success",
            extra=log_context(user_id=actor.id, rule_id=rule_id),
        )

    def unlock_rule(self, *, rule_id: UUID, actor: Actor) -> RuleOut:
        rule = self._require_rule(rule_id)
        unlocked = lock_guard.unlock(
            rule,
            actor,
            policy=self._unlock_policy,
            repository=self._repo,
        )
        return RuleOut.model_validate(unlocked)

    def lock_rule(self, *, rule_id: UUID, actor: Actor | None = None) -> RuleOut:
        """Lock ``rule_id``; driven by the review workflow rather than a user request."""

        if not self._repo.set_locked(rule_id, True):
            raise RuleNotFoundError(rule_id)
        locked = self._repo.reload(rule_id)
        if locked is None:
            raise RuleNotFoundError(rule_id)
        logger.info(
            "rule.lock.success",
            extra=log_context(user_id=actor.id if actor else None, rule_id=rule_id),
        )
        return RuleOut.model_validate(locked)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_rule(self, rule_id: UUID) -> Rule:
        rule = self._repo.get(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def _guard_lock(self, rule: Rule, actor: Actor, *, operation: str) -> None:
        try:
            lock_guard.ensure_unlocked(rule)
        except RuleLockedError:
            logger.info(
                f"rule.{operation}.locked",
                extra=log_context(user_id=actor.id, rule_id=rule.id),
            )
            raise

    def _raise_lost_write(self, rule_id: UUID, actor: Actor, *, operation: str) -> None:
        # The conditional write matched nothing: the rule vanished or was locked meanwhile.
        current = self._repo.reload(rule_id)
        if current is None:
            raise RuleNotFoundError(rule_id)
        logger.info(
            f"rule.{operation}.locked",
            extra=log_context(user_id=actor.id, rule_id=rule_id, concurrent=True),
        )
        raise RuleLockedError(rule_id)

    @staticmethod
    def _validated_changes(payload: RuleUpdate) -> dict[str, Any]:
        values = payload.model_dump(exclude_unset=True)
        blank = [field for field in _REQUIRED_FIELDS if field in values and values[field] is None]
        if blank:
            raise RecordInvalidError({field: ["can't be blank"] for field in blank})
        return values


__all__ = ["RulesService"]
