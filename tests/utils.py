"""Seed helpers shared by unit and integration tests."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy.orm import Session

from vulcan_db.models import Component, Membership, MembershipType, Project, Role, Rule, User


def create_user(
    session: Session,
    *,
    email: str | None = None,
    admin: bool = False,
    is_active: bool = True,
) -> User:
    user = User(
        email=email or f"user-{uuid4().hex[:8]}@example.com",
        name="Test User",
        admin=admin,
        is_active=is_active,
    )
    session.add(user)
    session.flush()
    return user


def create_project(session: Session, *, name: str = "Photon OS") -> Project:
    project = Project(name=name)
    session.add(project)
    session.flush()
    return project


def create_component(session: Session, project: Project, *, name: str = "Photon 4") -> Component:
    component = Component(project_id=project.id, name=name, version="1", release="1")
    session.add(component)
    session.flush()
    return component


def create_rule(
    session: Session,
    component: Component,
    *,
    rule_id: str = "PHTN-40-000001",
    locked: bool = False,
) -> Rule:
    rule = Rule(
        component_id=component.id,
        rule_id=rule_id,
        title="The system must enforce a delay between logon prompts.",
        locked=locked,
    )
    session.add(rule)
    session.flush()
    return rule


def grant(
    session: Session,
    user: User,
    target: Project | Component,
    role: Role,
) -> Membership:
    membership_type = (
        MembershipType.PROJECT if isinstance(target, Project) else MembershipType.COMPONENT
    )
    membership = Membership(
        user_id=user.id,
        membership_type=membership_type,
        membership_id=target.id,
        role=role,
    )
    session.add(membership)
    session.flush()
    return membership
