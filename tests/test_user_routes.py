"""End-to-end tests for registration, verification, login and the profile routes."""

from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from conftest import auth_headers, create_user
from models.user import User

REGISTRATION = {
    "firstName": "Jane",
    "lastName": "Doe",
    "email": "jane@example.com",
    "password": "password123",
}


def _register(client: FlaskClient, **overrides) -> dict:
    response = client.post("/v1/user", json={**REGISTRATION, **overrides})
    assert response.status_code == 201
    return response.get_json()


def _verify(app, client: FlaskClient, email: str) -> None:
    notifier = app.extensions["account_services"].notifier
    token = notifier.last_token_for(email)
    response = client.get("/v1/verifyEmail", query_string={"token": token})
    assert response.status_code == 200


def _login(client: FlaskClient, email: str, password: str) -> dict[str, str]:
    response = client.post("/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['access_token']}"}


def test_register_returns_created_user(client: FlaskClient):
    payload = _register(client)

    assert payload["email"] == "jane@example.com"
    assert payload["firstName"] == "Jane"
    assert payload["lastName"] == "Doe"
    assert payload["verified"] is False
    assert "password" not in payload


@pytest.mark.parametrize(
    "overrides",
    [
        {"password": "short"},
        {"email": "not-an-email"},
        {"firstName": ""},
        {"password": 12345678},
    ],
)
def test_register_validation(client: FlaskClient, overrides):
    response = client.post("/v1/user", json={**REGISTRATION, **overrides})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Bad Request"


def test_register_duplicate_email_is_bad_request(client: FlaskClient):
    _register(client)

    response = client.post("/v1/user", json=REGISTRATION)

    assert response.status_code == 400
    assert "already exists" in response.get_json()["detail"]


def test_full_registration_flow(app, client: FlaskClient):
    _register(client)
    headers = _login(client, "jane@example.com", "password123")

    # Unverified users are refused on gated routes.
    assert client.get("/v1/user/self", headers=headers).status_code == 403

    _verify(app, client, "jane@example.com")

    response = client.get("/v1/user/self", headers=headers)
    assert response.status_code == 200
    profile = response.get_json()
    assert profile["email"] == "jane@example.com"
    assert profile["verified"] is True


def test_login_rejects_bad_credentials(client: FlaskClient):
    _register(client)

    response = client.post(
        "/v1/auth/login", json={"email": "jane@example.com", "password": "wrong-password"}
    )

    assert response.status_code == 401


def test_self_requires_jwt(client: FlaskClient):
    assert client.get("/v1/user/self").status_code == 401


def test_update_self(app, client: FlaskClient):
    with app.app_context():
        create_user("update@example.com", verified=True, first_name="Old")
    headers = auth_headers(app, "update@example.com")

    response = client.put(
        "/v1/user/self",
        json={"email": "update@example.com", "firstName": "New", "password": "newpassword123"},
        headers=headers,
    )

    assert response.status_code == 204
    with app.app_context():
        user = User.query.filter_by(email="update@example.com").one()
        assert user.first_name == "New"
        assert user.check_password("newpassword123")


def test_update_self_cannot_change_email(app, client: FlaskClient):
    with app.app_context():
        create_user("fixed@example.com", verified=True)
    headers = auth_headers(app, "fixed@example.com")

    response = client.put(
        "/v1/user/self",
        json={"email": "moved@example.com", "firstName": "New"},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.get_json()["detail"] == "Email cannot be changed."


def test_unknown_identity_is_refused_by_gate(app, client: FlaskClient):
    response = client.get("/v1/user/self", headers=auth_headers(app, "ghost@example.com"))

    assert response.status_code == 403
