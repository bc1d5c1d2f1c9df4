"""Profile picture blueprint for the authenticated user."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from models.user import User
from services import get_services
from utils.request_validation import require_file

images_bp = Blueprint("images", __name__)


def _current_user() -> User:
    return get_services().users.get_user_entity_by_email(get_jwt_identity())


@images_bp.route("", methods=["GET"])
@jwt_required()
def get_image():
    user = _current_user()
    return jsonify(get_services().images.get_image(user.id))


@images_bp.route("", methods=["POST"])
@jwt_required()
def upload_image():
    """Replace the caller's image with the uploaded ``file``."""

    user = _current_user()
    file = require_file(request)
    image = get_services().images.upload_image(file, user)
    return jsonify(image), HTTPStatus.CREATED


@images_bp.route("", methods=["DELETE"])
@jwt_required()
def delete_image():
    user = _current_user()
    get_services().images.delete_image(user.id)
    return "", HTTPStatus.NO_CONTENT
