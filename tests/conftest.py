"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient
from flask_jwt_extended import create_access_token

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402
from services import AccountServices  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key-for-the-account-service"
    JWT_SECRET_KEY = "test-jwt-secret-key-for-the-account-service"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    RATE_LIMIT = "1000 per minute"
    STORAGE_BACKEND = "local"
    NOTIFIER_BACKEND = "memory"
    METRICS_BACKEND = "memory"
    VERIFICATION_EXPIRY_MINUTES = 30
    LOG_PATH = None


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    upload_dir = tmp_path / "uploads"

    class TestConfig(_BaseTestConfig):
        UPLOAD_DIR = str(upload_dir)

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def services(app: Flask) -> AccountServices:
    """Push an application context and return the app's services."""

    with app.app_context():
        yield app.extensions["account_services"]


def create_user(
    email: str,
    password: str = "password123",
    *,
    verified: bool = False,
    first_name: str = "Test",
    last_name: str = "User",
) -> User:
    """Persist a user directly, bypassing registration."""

    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        verified=verified,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def auth_headers(app: Flask, email: str) -> dict[str, str]:
    with app.app_context():
        token = create_access_token(identity=email)
    return {"Authorization": f"Bearer {token}"}
