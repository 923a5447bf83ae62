from __future__ import annotations

from collections.abc import Iterator
from uuid import uuid4

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from tests.utils import create_component, create_project, create_rule, create_user, grant
from vulcan_api.core.auth import Actor, NotAuthorizedError
from vulcan_api.core.rbac import PermissionResolver, ResourceHierarchy, ResourceRef
from vulcan_api.settings import Settings
from vulcan_db import Base
from vulcan_db.engine import build_engine
from vulcan_db.models import (
    Component,
    Membership,
    MembershipType,
    Project,
    ResourceKind,
    Role,
    Rule,
    User,
)


@pytest.fixture()
def tree(db_session: Session):
    project = create_project(db_session)
    component = create_component(db_session, project)
    rule = create_rule(db_session, component)
    return project, component, rule


def test_project_admin_is_admin_on_every_rule_below(db_session: Session, tree) -> None:
    project, _component, rule = tree
    user = create_user(db_session)
    grant(db_session, user, project, Role.ADMIN)

    resolver = PermissionResolver(db_session)

    assert resolver.effective_role(Actor.from_user(user), ResourceRef.rule(rule.id)) is Role.ADMIN


def test_global_admin_short_circuits_without_memberships(db_session: Session, tree) -> None:
    project, component, rule = tree
    actor = Actor.from_user(create_user(db_session, admin=True))
    resolver = PermissionResolver(db_session)

    for ref in (
        ResourceRef.project(project.id),
        ResourceRef.component(component.id),
        ResourceRef.rule(rule.id),
        ResourceRef.rule(uuid4()),
    ):
        assert resolver.effective_role(actor, ref) is Role.ADMIN


def test_no_grant_resolves_to_none(db_session: Session, tree) -> None:
    project, component, rule = tree
    actor = Actor.from_user(create_user(db_session))
    resolver = PermissionResolver(db_session)

    assert resolver.effective_role(actor, ResourceRef.project(project.id)) is Role.NONE
    assert resolver.effective_role(actor, ResourceRef.component(component.id)) is Role.NONE
    assert resolver.effective_role(actor, ResourceRef.rule(rule.id)) is Role.NONE


def test_component_grant_does_not_flow_up_to_project(db_session: Session, tree) -> None:
    project, component, rule = tree
    user = create_user(db_session)
    grant(db_session, user, component, Role.MEMBER)
    actor = Actor.from_user(user)
    resolver = PermissionResolver(db_session)

    assert resolver.effective_role(actor, ResourceRef.rule(rule.id)) is Role.MEMBER
    assert resolver.effective_role(actor, ResourceRef.project(project.id)) is Role.NONE


def test_highest_role_across_the_chain_wins(db_session: Session, tree) -> None:
    project, component, rule = tree
    user = create_user(db_session)
    grant(db_session, user, project, Role.VIEWER)
    grant(db_session, user, component, Role.ADMIN)

    resolver = PermissionResolver(db_session)

    assert resolver.effective_role(Actor.from_user(user), ResourceRef.rule(rule.id)) is Role.ADMIN


def test_grant_on_missing_resource_is_ignored(db_session: Session) -> None:
    user = create_user(db_session)
    orphan_id = uuid4()
    db_session.add(
        Membership(
            user_id=user.id,
            membership_type=MembershipType.PROJECT,
            membership_id=orphan_id,
            role=Role.ADMIN,
        )
    )
    db_session.flush()
    resolver = PermissionResolver(db_session)
    actor = Actor.from_user(user)

    assert resolver.effective_role(actor, ResourceRef.project(orphan_id)) is Role.NONE
    assert resolver.direct_role(actor, ResourceRef.project(orphan_id)) is Role.NONE


def test_direct_role_ignores_inherited_grants(db_session: Session, tree) -> None:
    project, component, _rule = tree
    user = create_user(db_session)
    grant(db_session, user, project, Role.ADMIN)
    actor = Actor.from_user(user)
    resolver = PermissionResolver(db_session)

    assert resolver.effective_role(actor, ResourceRef.component(component.id)) is Role.ADMIN
    assert resolver.direct_role(actor, ResourceRef.component(component.id)) is Role.NONE
    assert resolver.direct_role(actor, ResourceRef.project(project.id)) is Role.ADMIN


def test_authorize_rejects_with_resource_kind(db_session: Session, tree) -> None:
    _project, component, rule = tree
    user = create_user(db_session)
    grant(db_session, user, component, Role.VIEWER)
    resolver = PermissionResolver(db_session)

    with pytest.raises(NotAuthorizedError) as excinfo:
        resolver.authorize(Actor.from_user(user), ResourceRef.rule(rule.id), Role.MEMBER)

    assert excinfo.value.resource_kind == "Rule"
    assert "Rule" in str(excinfo.value)


def test_authorize_returns_effective_role(db_session: Session, tree) -> None:
    project, _component, rule = tree
    user = create_user(db_session)
    grant(db_session, user, project, Role.REVIEWER)
    resolver = PermissionResolver(db_session)

    role = resolver.authorize(Actor.from_user(user), ResourceRef.rule(rule.id), Role.MEMBER)

    assert role is Role.REVIEWER


def test_authorize_direct_rejects_inherited_admin(db_session: Session, tree) -> None:
    project, component, _rule = tree
    user = create_user(db_session)
    grant(db_session, user, project, Role.ADMIN)
    resolver = PermissionResolver(db_session)

    with pytest.raises(NotAuthorizedError) as excinfo:
        resolver.authorize_direct(
            Actor.from_user(user), ResourceRef.component(component.id), Role.ADMIN
        )

    assert excinfo.value.resource_kind == ResourceKind.COMPONENT.value


def test_hierarchy_grant_chain_for_rule(db_session: Session, tree) -> None:
    project, component, rule = tree
    hierarchy = ResourceHierarchy(db_session)

    assert hierarchy.grant_chain(ResourceRef.rule(rule.id)) == [
        ResourceRef.component(component.id),
        ResourceRef.project(project.id),
    ]
    assert hierarchy.parent_of(ResourceRef.project(project.id)) is None
    assert hierarchy.grant_chain(ResourceRef.rule(uuid4())) == []


@pytest.fixture()
def legacy_session(settings: Settings) -> Iterator[Session]:
    """Session over a memberships table created before the uniqueness constraint."""

    engine = build_engine(settings)
    Base.metadata.create_all(
        engine,
        tables=[User.__table__, Project.__table__, Component.__table__, Rule.__table__],
    )
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE memberships ("
                "id CHAR(36) NOT NULL PRIMARY KEY, "
                "user_id CHAR(36) NOT NULL REFERENCES users (id), "
                "membership_type VARCHAR(20) NOT NULL, "
                "membership_id CHAR(36) NOT NULL, "
                "role VARCHAR(20) NOT NULL, "
                "created_at DATETIME NOT NULL, "
                "updated_at DATETIME NOT NULL)"
            )
        )
    session = Session(bind=engine)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def test_duplicate_grants_resolve_to_highest_role(legacy_session: Session) -> None:
    project = create_project(legacy_session)
    component = create_component(legacy_session, project)
    rule = create_rule(legacy_session, component)
    user = create_user(legacy_session)
    for role in (Role.VIEWER, Role.ADMIN, Role.MEMBER):
        legacy_session.add(
            Membership(
                user_id=user.id,
                membership_type=MembershipType.PROJECT,
                membership_id=project.id,
                role=role,
            )
        )
    legacy_session.flush()
    resolver = PermissionResolver(legacy_session)
    actor = Actor.from_user(user)

    assert resolver.direct_role(actor, ResourceRef.project(project.id)) is Role.ADMIN
    assert resolver.effective_role(actor, ResourceRef.rule(rule.id)) is Role.ADMIN
