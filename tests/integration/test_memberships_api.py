from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy import select

from vulcan_db.models import Membership, Role

MEMBERSHIPS = "/api/v1/memberships"


def _body(membership_type: str, target_id, user_id, role: str = "member") -> dict:
    return {
        "membership": {
            "membership_type": membership_type,
            "membership_id": str(target_id),
            "user_id": str(user_id),
            "role": role,
        }
    }


def test_project_admin_adds_member_to_project(client: TestClient, world, as_user, app_sessions) -> None:
    response = client.post(
        MEMBERSHIPS,
        json=_body("Project", world.project_id, world.outsider_id),
        headers=as_user(world.project_admin_id),
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["notice"] == "Successfully created membership."
    assert payload["target"] == {"kind": "Project", "id": str(world.project_id)}
    assert payload["membership"]["role"] == "member"

    listing = client.get(
        MEMBERSHIPS,
        params={"membership_type": "Project", "membership_id": str(world.project_id)},
        headers=as_user(world.outsider_id),
    )
    assert listing.status_code == 200
    assert str(world.outsider_id) in {item["user_id"] for item in listing.json()["items"]}


def test_unwrapped_body_is_accepted(client: TestClient, world, as_user) -> None:
    response = client.post(
        MEMBERSHIPS,
        json=_body("Component", world.component_id, world.outsider_id, "viewer")["membership"],
        headers=as_user(world.component_admin_id),
    )

    assert response.status_code == 201


def test_inherited_project_admin_cannot_add_component_member(
    client: TestClient,
    world,
    as_user,
    app_sessions,
) -> None:
    response = client.post(
        MEMBERSHIPS,
        json=_body("Component", world.component_id, world.outsider_id),
        headers=as_user(world.project_admin_id),
    )

    assert response.status_code == 403
    problem = response.json()
    assert problem["type"] == "forbidden"
    assert "Component" in problem["detail"]
    with app_sessions() as session:
        rows = session.scalars(
            select(Membership).where(Membership.user_id == world.outsider_id)
        ).all()
    assert rows == []


def test_validation_failure_lists_field_messages(client: TestClient, world, as_user) -> None:
    response = client.post(
        MEMBERSHIPS,
        json={"membership": {"membership_type": "Project", "membership_id": str(world.project_id)}},
        headers=as_user(world.project_admin_id),
    )

    assert response.status_code == 422
    problem = response.json()
    assert problem["type"] == "validation_error"
    assert problem["detail"] == "Unable to create membership."
    assert {(item["path"], item["message"]) for item in problem["errors"]} == {
        ("user_id", "can't be blank"),
        ("role", "can't be blank"),
    }


def test_unknown_role_is_a_request_error(client: TestClient, world, as_user) -> None:
    response = client.post(
        MEMBERSHIPS,
        json=_body("Project", world.project_id, world.outsider_id, role="owner"),
        headers=as_user(world.project_admin_id),
    )

    assert response.status_code == 422
    assert response.json()["type"] == "validation_error"


def test_inherited_admin_updates_component_membership(
    client: TestClient,
    world,
    as_user,
    app_sessions,
) -> None:
    with app_sessions() as session:
        membership_id = session.scalars(
            select(Membership.id).where(Membership.user_id == world.editor_id)
        ).one()

    response = client.put(
        f"{MEMBERSHIPS}/{membership_id}",
        json={"membership": {"role": "reviewer"}},
        headers=as_user(world.project_admin_id),
    )

    assert response.status_code == 200
    assert response.json()["notice"] == "Successfully updated membership."
    with app_sessions() as session:
        assert session.get(Membership, membership_id).role is Role.REVIEWER


def test_member_cannot_update_memberships(client: TestClient, world, as_user, app_sessions) -> None:
    with app_sessions() as session:
        membership_id = session.scalars(
            select(Membership.id).where(Membership.user_id == world.viewer_id)
        ).one()

    response = client.put(
        f"{MEMBERSHIPS}/{membership_id}",
        json={"role": "admin"},
        headers=as_user(world.editor_id),
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "You are not authorized to manage permissions on this Project"


def test_destroy_membership(client: TestClient, world, as_user, app_sessions) -> None:
    with app_sessions() as session:
        membership_id = session.scalars(
            select(Membership.id).where(Membership.user_id == world.viewer_id)
        ).one()

    response = client.delete(
        f"{MEMBERSHIPS}/{membership_id}",
        headers=as_user(world.global_admin_id),
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["notice"] == "Successfully removed membership."
    assert payload["target"]["id"] == str(world.project_id)
    with app_sessions() as session:
        assert session.get(Membership, membership_id) is None


def test_unknown_membership_is_not_found(client: TestClient, world, as_user) -> None:
    response = client.delete(f"{MEMBERSHIPS}/{uuid4()}", headers=as_user(world.global_admin_id))

    assert response.status_code == 404
    assert response.json()["type"] == "not_found"


def test_requests_without_an_active_user_are_unauthorized(client: TestClient, world, as_user) -> None:
    body = _body("Project", world.project_id, world.outsider_id)

    missing = client.post(MEMBERSHIPS, json=body)
    malformed = client.post(MEMBERSHIPS, json=body, headers={"X-Vulcan-User-Id": "nope"})
    inactive = client.post(MEMBERSHIPS, json=body, headers=as_user(world.inactive_id))

    for response in (missing, malformed, inactive):
        assert response.status_code == 401
        assert response.headers["content-type"].startswith("application/problem+json")
