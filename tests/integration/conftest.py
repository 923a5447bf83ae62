from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from tests.utils import create_component, create_project, create_rule, create_user, grant
from vulcan_api.db import get_session_factory_from_app, init_db
from vulcan_api.main import create_app
from vulcan_api.settings import Settings
from vulcan_db import Base
from vulcan_db.models import Role


@dataclass(frozen=True, slots=True)
class SeededWorld:
    project_id: UUID
    component_id: UUID
    rule_id: UUID
    locked_rule_id: UUID
    global_admin_id: UUID
    project_admin_id: UUID
    component_admin_id: UUID
    editor_id: UUID
    viewer_id: UUID
    outsider_id: UUID
    inactive_id: UUID


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    app = create_app(settings)
    # Lifespan is skipped under TestClient without a context manager; wire the DB directly.
    init_db(app, settings)
    Base.metadata.create_all(app.state.db_engine)
    return app


@pytest.fixture()
def app_sessions(app: FastAPI) -> sessionmaker[Session]:
    return get_session_factory_from_app(app)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    client = TestClient(app)
    try:
        yield client
    finally:
        client.close()
        app.state.db_engine.dispose()


@pytest.fixture()
def world(app_sessions: sessionmaker[Session]) -> SeededWorld:
    with app_sessions() as session, session.begin():
        project = create_project(session)
        component = create_component(session, project)
        rule = create_rule(session, component)
        locked_rule = create_rule(session, component, rule_id="PHTN-40-000099", locked=True)

        global_admin = create_user(session, email="root@example.com", admin=True)
        project_admin = create_user(session, email="lead@example.com")
        component_admin = create_user(session, email="owner@example.com")
        editor = create_user(session, email="author@example.com")
        viewer = create_user(session, email="viewer@example.com")
        outsider = create_user(session, email="outsider@example.com")
        inactive = create_user(session, email="former@example.com", is_active=False)

        grant(session, project_admin, project, Role.ADMIN)
        grant(session, component_admin, component, Role.ADMIN)
        grant(session, editor, component, Role.MEMBER)
        grant(session, viewer, project, Role.VIEWER)

        return SeededWorld(
            project_id=project.id,
            component_id=component.id,
            rule_id=rule.id,
            locked_rule_id=locked_rule.id,
            global_admin_id=global_admin.id,
            project_admin_id=project_admin.id,
            component_admin_id=component_admin.id,
            editor_id=editor.id,
            viewer_id=viewer.id,
            outsider_id=outsider.id,
            inactive_id=inactive.id,
        )


@pytest.fixture()
def as_user(settings: Settings) -> Callable[[UUID], dict[str, str]]:
    def _headers(user_id: UUID) -> dict[str, str]:
        return {settings.auth_user_header: str(user_id)}

    return _headers
