"""Persistence helpers for rules.

Writes that must respect the lock are single conditional statements so the
lock check and the mutation cannot be interleaved with a concurrent lock flip.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import delete, false, update
from sqlalchemy.orm import Session

from vulcan_db.models import Rule


class RulesRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, rule_id: UUID) -> Rule | None:
        return self._session.get(Rule, rule_id)

    def reload(self, rule_id: UUID) -> Rule | None:
        return self._session.get(Rule, rule_id, populate_existing=True)

    def add(self, rule: Rule) -> Rule:
        self._session.add(rule)
        self._session.flush([rule])
        return rule

    def update_unlocked(self, rule_id: UUID, values: Mapping[str, Any]) -> bool:
        """Apply ``values`` only while the rule is unlocked; ``False`` when no row matched."""

        stmt = (
            update(Rule)
            .where(Rule.id == rule_id, Rule.locked == false())
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self._session.execute(stmt).rowcount == 1

    def delete_unlocked(self, rule_id: UUID) -> bool:
        stmt = (
            delete(Rule)
            .where(Rule.id == rule_id, Rule.locked == false())
            .execution_options(synchronize_session=False)
        )
        deleted = self._session.execute(stmt).rowcount == 1
        if deleted:
            cached = self._session.identity_map.get(self._session.identity_key(Rule, rule_id))
            if cached is not None:
                self._session.expunge(cached)
        return deleted

    def set_locked(self, rule_id: UUID, locked: bool) -> bool:
        # Lock-flag changes skip content validation entirely.
        stmt = (
            update(Rule)
            .where(Rule.id == rule_id)
            .values(locked=locked)
            .execution_options(synchronize_session=False)
        )
        return self._session.execute(stmt).rowcount == 1


__all__ = ["RulesRepository"]
