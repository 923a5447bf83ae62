from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient


def test_unknown_route_is_a_not_found_problem(client: TestClient) -> None:
    response = client.get("/api/v1/nowhere")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    problem = response.json()
    assert problem["type"] == "not_found"
    assert problem["detail"] == "Not Found"
    assert problem["instance"] == "/api/v1/nowhere"


def test_request_validation_errors_point_at_the_field(client: TestClient, world, as_user) -> None:
    response = client.post(
        "/api/v1/memberships",
        json={
            "membership": {
                "membership_type": "Project",
                "membership_id": str(world.project_id),
                "user_id": str(world.outsider_id),
                "role": "owner",
            }
        },
        headers=as_user(world.project_admin_id),
    )

    assert response.status_code == 422
    problem = response.json()
    assert problem["detail"] == "Invalid request"
    assert [item["path"] for item in problem["errors"]] == ["role"]


def test_unexpected_errors_are_opaque(app: FastAPI) -> None:
    @app.get("/api/v1/boom")
    def boom() -> None:
        raise RuntimeError("connection string with secrets")

    client = TestClient(app, raise_server_exceptions=False)
    response = client.get("/api/v1/boom", headers={"X-Request-ID": "boom-1"})

    assert response.status_code == 500
    problem = response.json()
    assert problem["type"] == "internal_error"
    assert problem["detail"] == "Internal server error"
    assert "secrets" not in response.text
