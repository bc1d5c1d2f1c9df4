"""Authentication blueprint issuing access tokens for registered users."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token
from werkzeug.exceptions import BadRequest, Unauthorized

from services import get_services
from utils.request_validation import optional_string, parse_json_request

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a JWT whose identity is their email."""
    payload = parse_json_request(request)
    email = optional_string(payload, "email")
    password = optional_string(payload, "password")

    if not email or not password:
        raise BadRequest("Email and password are required.")

    user = get_services().users.authenticate(email, password)
    if user is None:
        raise Unauthorized("Invalid email or password.")

    token = create_access_token(identity=user.email)
    return (
        jsonify({"access_token": token, "user": user.to_dict()}),
        HTTPStatus.OK,
    )
