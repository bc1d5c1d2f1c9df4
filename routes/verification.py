"""Email verification blueprint."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from services import VerificationOutcome, get_services

verification_bp = Blueprint("verification", __name__)


@verification_bp.route("/verifyEmail", methods=["GET"])
def verify_email():
    """Consume the token from the query string."""

    outcome = get_services().verification.verify_token(request.args.get("token"))
    if outcome is VerificationOutcome.CONSUMED:
        return jsonify({"message": "Email verified successfully"}), HTTPStatus.OK
    return (
        jsonify({"message": "Verification failed", "reason": outcome.value}),
        HTTPStatus.BAD_REQUEST,
    )
