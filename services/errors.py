"""Domain errors raised by the account services.

Each error subclasses the matching werkzeug ``HTTPException`` so the
application-level JSON error handler renders it with a fixed status code.
"""

from werkzeug.exceptions import BadRequest
from werkzeug.exceptions import Forbidden as _Forbidden
from werkzeug.exceptions import InternalServerError
from werkzeug.exceptions import NotFound as _NotFound


class InvalidInput(BadRequest):
    """Bad password, bad file, email change attempt (400)."""


class Conflict(InvalidInput):
    """Email already registered (reported as 400)."""

    description = "User with this email already exists."


class NotFound(_NotFound):
    """Unknown user or image (404)."""


class Forbidden(_Forbidden):
    """Unverified user touching a gated route (403)."""

    description = "Email address has not been verified."


class Internal(InternalServerError):
    """Unexpected persistence, object store or notifier failure (500)."""


class VerificationDispatchError(Internal):
    """The verification token could not be persisted or published."""

    description = "Failed to send verification email."
