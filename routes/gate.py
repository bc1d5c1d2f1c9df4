"""Request hooks shared by every blueprint: verification gate and metrics."""

from __future__ import annotations

import logging
import time

from flask import Flask, Response, g, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from services import get_services
from services.errors import Forbidden

logger = logging.getLogger(__name__)

# Endpoints reachable without a verified email, keyed to the methods allowed.
UNGATED_ENDPOINTS = {
    "verification.verify_email": None,
    "users.create_user": {"POST"},
    "auth.login": None,
    "health_check": None,
}


def _is_ungated() -> bool:
    if request.method == "OPTIONS" or request.endpoint is None:
        return True
    if request.endpoint not in UNGATED_ENDPOINTS:
        return False
    methods = UNGATED_ENDPOINTS[request.endpoint]
    return methods is None or request.method in methods


def _metric_path() -> str:
    return request.url_rule.rule if request.url_rule is not None else "unmatched"


def register_verification_gate(app: Flask) -> None:
    """Refuse authenticated but unverified users on gated routes."""

    @app.before_request
    def _require_verified_email():
        if _is_ungated():
            return None
        verify_jwt_in_request(optional=True)
        identity = get_jwt_identity()
        if identity is None:
            return None
        if not get_services().users.is_user_verified(identity):
            logger.warning("Unverified user %s refused on %s", identity, request.path)
            raise Forbidden()
        return None


def register_request_metrics(app: Flask) -> None:
    """Count and time every request."""

    @app.before_request
    def _start_request_timer():
        g.request_started = time.perf_counter()
        get_services().metrics.increment(
            "http.requests", method=request.method, path=_metric_path(), status="started"
        )

    @app.after_request
    def _record_request(response: Response) -> Response:
        started = g.pop("request_started", None)
        if started is None:
            return response
        status = "success" if response.status_code < 400 else "error"
        duration = (time.perf_counter() - started) * 1000
        metrics = get_services().metrics
        tags = {"method": request.method, "path": _metric_path(), "status": status}
        metrics.increment("http.requests", **tags)
        metrics.timing("http.response.time", duration, **tags)
        logger.debug(
            "Completed request - Method: %s Path: %s Duration: %.1fms",
            request.method,
            request.path,
            duration,
        )
        return response


def record_request_error(error: Exception) -> None:
    get_services().metrics.increment(
        "http.errors",
        method=request.method,
        path=_metric_path(),
        error=type(error).__name__,
    )
