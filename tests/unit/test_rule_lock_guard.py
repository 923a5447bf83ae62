from __future__ import annotations

import pytest
from sqlalchemy import update
from sqlalchemy.orm import Session

from tests.utils import create_component, create_project, create_rule, create_user, grant
from vulcan_api.core.auth import Actor, NotAuthorizedError
from vulcan_api.core.errors import RuleLockedError
from vulcan_api.features.rules import exceptions as rule_exceptions
from vulcan_api.features.rules import lock_guard
from vulcan_api.features.rules.repository import RulesRepository
from vulcan_api.features.rules.schemas import RuleUpdate
from vulcan_api.features.rules.service import RulesService
from vulcan_api.settings import Settings
from vulcan_db.models import Role, Rule


class _StaticUnlockPolicy:
    def __init__(self, allowed: bool) -> None:
        self.allowed = allowed
        self.calls: list[tuple[Actor, Rule]] = []

    def can_unlock(self, actor: Actor, rule: Rule) -> bool:
        self.calls.append((actor, rule))
        return self.allowed


@pytest.fixture()
def component(db_session: Session):
    return create_component(db_session, create_project(db_session))


def test_ensure_unlocked_passes_for_unlocked_rule(db_session: Session, component) -> None:
    lock_guard.ensure_unlocked(create_rule(db_session, component))


def test_ensure_unlocked_rejects_locked_rule(db_session: Session, component) -> None:
    rule = create_rule(db_session, component, locked=True)

    with pytest.raises(RuleLockedError) as excinfo:
        lock_guard.ensure_unlocked(rule)

    assert excinfo.value.rule_id == str(rule.id)
    assert rule_exceptions.RuleLockedError is RuleLockedError


@pytest.mark.parametrize("operation", ["update", "delete"])
def test_locked_rule_rejects_global_admin(
    db_session: Session,
    settings: Settings,
    component,
    operation: str,
) -> None:
    rule = create_rule(db_session, component, locked=True)
    admin = Actor.from_user(create_user(db_session, admin=True))
    service = RulesService(session=db_session, settings=settings)

    with pytest.raises(RuleLockedError):
        if operation == "update":
            service.update_rule(rule_id=rule.id, payload=RuleUpdate(title="Edited"), actor=admin)
        else:
            service.delete_rule(rule_id=rule.id, actor=admin)

    assert db_session.get(Rule, rule.id, populate_existing=True).title != "Edited"


def test_lock_is_checked_before_role(db_session: Session, settings: Settings, component) -> None:
    rule = create_rule(db_session, component, locked=True)
    outsider = Actor.from_user(create_user(db_session))
    service = RulesService(session=db_session, settings=settings)

    with pytest.raises(RuleLockedError):
        service.update_rule(rule_id=rule.id, payload=RuleUpdate(title="x"), actor=outsider)


def test_unlock_requires_capability(db_session: Session, component) -> None:
    rule = create_rule(db_session, component, locked=True)
    actor = Actor.from_user(create_user(db_session))
    policy = _StaticUnlockPolicy(allowed=False)

    with pytest.raises(NotAuthorizedError):
        lock_guard.unlock(rule, actor, policy=policy, repository=RulesRepository(db_session))

    assert db_session.get(Rule, rule.id, populate_existing=True).locked is True
    assert policy.calls == [(actor, rule)]


def test_unlock_with_capability_clears_lock(db_session: Session, component) -> None:
    rule = create_rule(db_session, component, locked=True)
    actor = Actor.from_user(create_user(db_session))

    unlocked = lock_guard.unlock(
        rule,
        actor,
        policy=_StaticUnlockPolicy(allowed=True),
        repository=RulesRepository(db_session),
    )

    assert unlocked.locked is False


def test_unlock_is_idempotent(db_session: Session, component) -> None:
    rule = create_rule(db_session, component, locked=False)
    actor = Actor.from_user(create_user(db_session))

    unlocked = lock_guard.unlock(
        rule,
        actor,
        policy=_StaticUnlockPolicy(allowed=True),
        repository=RulesRepository(db_session),
    )

    assert unlocked.locked is False


def test_unlock_then_edit_by_authorized_editor(
    db_session: Session,
    settings: Settings,
    component,
) -> None:
    rule = create_rule(db_session, component, locked=True)
    admin = Actor.from_user(create_user(db_session, admin=True))
    editor_user = create_user(db_session)
    grant(db_session, editor_user, component, Role.MEMBER)
    editor = Actor.from_user(editor_user)
    service = RulesService(session=db_session, settings=settings)

    assert service.unlock_rule(rule_id=rule.id, actor=admin).locked is False
    updated = service.update_rule(
        rule_id=rule.id,
        payload=RuleUpdate(title="Revised title"),
        actor=editor,
    )

    assert updated.title == "Revised title"
    assert updated.locked is False


def test_default_policy_denies_member_unlock(
    db_session: Session,
    settings: Settings,
    component,
) -> None:
    rule = create_rule(db_session, component, locked=True)
    member = create_user(db_session)
    grant(db_session, member, component, Role.MEMBER)
    service = RulesService(session=db_session, settings=settings)

    with pytest.raises(NotAuthorizedError) as excinfo:
        service.unlock_rule(rule_id=rule.id, actor=Actor.from_user(member))

    assert excinfo.value.resource_kind == "Rule"
    assert db_session.get(Rule, rule.id, populate_existing=True).locked is True


def test_unlock_threshold_follows_settings(db_session: Session, component) -> None:
    rule = create_rule(db_session, component, locked=True)
    reviewer = create_user(db_session)
    grant(db_session, reviewer, component, Role.REVIEWER)
    settings = Settings(_env_file=None, database_url="sqlite://", rule_unlock_min_role="reviewer")
    service = RulesService(session=db_session, settings=settings)

    assert service.unlock_rule(rule_id=rule.id, actor=Actor.from_user(reviewer)).locked is False


def test_lock_flipped_after_read_is_still_rejected(
    db_session: Session,
    settings: Settings,
    component,
) -> None:
    rule = create_rule(db_session, component)
    editor_user = create_user(db_session)
    grant(db_session, editor_user, component, Role.MEMBER)
    service = RulesService(session=db_session, settings=settings)

    # Another writer locks the row without the loaded instance noticing.
    db_session.execute(
        update(Rule)
        .where(Rule.id == rule.id)
        .values(locked=True)
        .execution_options(synchronize_session=False)
    )
    assert rule.locked is False

    with pytest.raises(RuleLockedError):
        service.update_rule(
            rule_id=rule.id,
            payload=RuleUpdate(title="Racing edit"),
            actor=Actor.from_user(editor_user),
        )
    with pytest.raises(RuleLockedError):
        service.delete_rule(rule_id=rule.id, actor=Actor.from_user(editor_user))

    stored = db_session.get(Rule, rule.id, populate_existing=True)
    assert stored is not None
    assert stored.title != "Racing edit"
