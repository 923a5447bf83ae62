"""Rule lock state machine.

A rule is either unlocked or locked. Updates and deletes are refused on a
locked rule regardless of the actor's role; the only way back to unlocked is
:func:`unlock`, gated by an :class:`~vulcan_api.core.rbac.UnlockPolicy`.
"""

from __future__ import annotations

import logging

from vulcan_api.common.logging import log_context
from vulcan_api.core.auth import Actor, NotAuthorizedError
from vulcan_api.core.rbac import UnlockPolicy
from vulcan_db.models import ResourceKind, Rule

from .exceptions import RuleLockedError, RuleNotFoundError
from .repository import RulesRepository

logger = logging.getLogger(__name__)


def ensure_unlocked(rule: Rule) -> None:
    """Raise :class:`RuleLockedError` when ``rule`` is locked."""

    if rule.locked:
        raise RuleLockedError(rule.id)


def unlock(
    rule: Rule,
    actor: Actor,
    *,
    policy: UnlockPolicy,
    repository: RulesRepository,
) -> Rule:
    """Clear the lock on ``rule`` if ``actor`` holds the unlock capability.

    Unlocking an already unlocked rule is a no-op. The flag is written directly,
    bypassing content validation, so a rule with otherwise invalid content can
    still be reopened for editing.
    """

    if not policy.can_unlock(actor, rule):
        logger.warning(
            "rule.unlock.denied",
            extra=log_context(user_id=actor.id, rule_id=rule.id),
        )
        raise NotAuthorizedError(
            ResourceKind.RULE,
            "You are not authorized to unlock this Rule",
        )

    was_locked = rule.locked
    if was_locked and not repository.set_locked(rule.id, False):
        raise RuleNotFoundError(rule.id)

    refreshed = repository.reload(rule.id)
    if refreshed is None:
        raise RuleNotFoundError(rule.id)
    logger.info(
        "rule.unlock.success",
        extra=log_context(user_id=actor.id, rule_id=rule.id, was_locked=was_locked),
    )
    return refreshed


__all__ = ["ensure_unlocked", "unlock"]
