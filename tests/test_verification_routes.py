"""Tests for the email verification endpoint."""

from __future__ import annotations

from datetime import timedelta

from conftest import create_user
from models import db, utcnow
from models.user import User
from models.verification_token import VerificationToken


def _issue(app, email: str) -> str:
    with app.app_context():
        services = app.extensions["account_services"]
        user = create_user(email)
        token = services.verification.issue_token(user).token
        db.session.commit()
    return token


def test_verify_email_succeeds_once(app, client):
    token = _issue(app, "once@example.com")

    first = client.get("/v1/verifyEmail", query_string={"token": token})
    assert first.status_code == 200
    assert first.get_json()["message"] == "Email verified successfully"

    second = client.get("/v1/verifyEmail", query_string={"token": token})
    assert second.status_code == 400
    assert second.get_json() == {
        "message": "Verification failed",
        "reason": "already_consumed",
    }

    with app.app_context():
        assert User.query.filter_by(email="once@example.com").one().verified is True


def test_verify_email_unknown_token(client):
    response = client.get("/v1/verifyEmail", query_string={"token": "nope"})

    assert response.status_code == 400
    assert response.get_json()["reason"] == "unknown"


def test_verify_email_missing_token(client):
    response = client.get("/v1/verifyEmail")

    assert response.status_code == 400
    assert response.get_json()["reason"] == "unknown"


def test_verify_email_expired_token(app, client):
    token = _issue(app, "late@example.com")
    with app.app_context():
        record = db.session.get(VerificationToken, token)
        record.expiry_time = utcnow() - timedelta(minutes=1)
        db.session.commit()

    response = client.get("/v1/verifyEmail", query_string={"token": token})

    assert response.status_code == 400
    assert response.get_json()["reason"] == "expired"
    with app.app_context():
        assert User.query.filter_by(email="late@example.com").one().verified is False
