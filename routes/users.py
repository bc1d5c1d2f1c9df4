"""User account blueprint: registration and the caller's own profile."""

from __future__ import annotations

import logging
from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from services import get_services
from utils.request_validation import optional_string, parse_json_request

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__)


@users_bp.route("", methods=["POST"])
def create_user():
    """Register a new account and send its verification email."""

    payload = parse_json_request(
        request, required_keys=("firstName", "lastName", "email", "password")
    )
    logger.info("Received user creation request for email: %s", payload.get("email"))

    user = get_services().users.create_user(
        first_name=optional_string(payload, "firstName"),
        last_name=optional_string(payload, "lastName"),
        email=optional_string(payload, "email"),
        password=optional_string(payload, "password"),
    )
    return jsonify(user), HTTPStatus.CREATED


@users_bp.route("/self", methods=["GET"])
@jwt_required()
def get_self():
    """Return the authenticated user's profile."""

    return jsonify(get_services().users.get_user_by_email(get_jwt_identity()))


@users_bp.route("/self", methods=["PUT"])
@jwt_required()
def update_self():
    """Update names and password; the email in the body must be unchanged."""

    payload = parse_json_request(request)
    get_services().users.update_user(
        get_jwt_identity(),
        email=optional_string(payload, "email"),
        first_name=optional_string(payload, "firstName"),
        last_name=optional_string(payload, "lastName"),
        password=optional_string(payload, "password"),
    )
    return "", HTTPStatus.NO_CONTENT
