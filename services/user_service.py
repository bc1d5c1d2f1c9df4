"""Account creation, lookup and update."""

from __future__ import annotations

import logging
import re
import time

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db, utcnow
from models.user import User

from .errors import Conflict, Internal, InvalidInput, NotFound, VerificationDispatchError
from .metrics import MetricsCollector
from .verification_service import VerificationService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")


def normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


class UserService:
    """Owns the account lifecycle and the password policy."""

    def __init__(
        self,
        verification_service: VerificationService,
        metrics: MetricsCollector,
        min_password_length: int = 8,
    ):
        self.verification_service = verification_service
        self.metrics = metrics
        self.min_password_length = min_password_length

    def create_user(
        self,
        first_name: str | None,
        last_name: str | None,
        email: str | None,
        password: str | None,
    ) -> dict:
        """Register an unverified user and send them a verification token."""

        email = normalize_email(email)
        logger.info("Attempting to create new user with email: %s", email)
        start = time.perf_counter()

        if not EMAIL_PATTERN.match(email):
            raise InvalidInput("A valid email address is required.")
        if self._find(email) is not None:
            logger.warning("User creation failed: email already exists: %s", email)
            raise Conflict()
        self._validate_password(password)

        user = User(first_name=first_name, last_name=last_name, email=email, verified=False)
        user.set_password(password)

        try:
            db.session.add(user)
            db.session.flush()
            self.verification_service.issue_token(user)
            db.session.commit()
        except VerificationDispatchError:
            db.session.rollback()
            raise
        except IntegrityError as exc:
            db.session.rollback()
            raise Conflict() from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Unexpected error while creating user: %s", email)
            raise Internal("Error creating user.") from exc

        self.metrics.increment("webapp.user.creation")
        self.metrics.timing("webapp.db.operation.time", (time.perf_counter() - start) * 1000)
        logger.info("User created successfully: %s", email)
        return user.to_dict()

    def get_user_by_email(self, email: str) -> dict:
        return self.get_user_entity_by_email(email).to_dict()

    def get_user_entity_by_email(self, email: str) -> User:
        user = self._find(normalize_email(email))
        if user is None:
            logger.warning("User not found with email: %s", email)
            raise NotFound("User not found.")
        return user

    def update_user(
        self,
        current_email: str,
        email: str | None,
        first_name: str | None = None,
        last_name: str | None = None,
        password: str | None = None,
    ) -> dict:
        """Update names and password; the email address is immutable."""

        logger.info("Attempting to update user: %s", current_email)
        start = time.perf_counter()
        user = self.get_user_entity_by_email(current_email)

        if normalize_email(email) != user.email:
            logger.warning("Update attempt failed: email cannot be changed for user: %s", current_email)
            raise InvalidInput("Email cannot be changed.")

        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if password is not None:
            self._validate_password(password)
            user.set_password(password)
        user.account_updated = utcnow()

        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Error updating user: %s", current_email)
            raise Internal("Error updating user.") from exc

        self.metrics.timing("webapp.db.operation.time", (time.perf_counter() - start) * 1000)
        logger.info("User updated successfully: %s", user.email)
        return user.to_dict()

    def is_user_verified(self, email: str | None) -> bool:
        """Return the verification flag, or False for unknown or unreadable users."""

        try:
            user = self._find(normalize_email(email))
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Could not check verification status for user: %s", email)
            return False
        return bool(user is not None and user.verified)

    def authenticate(self, email: str | None, password: str | None) -> User | None:
        user = self._find(normalize_email(email))
        if user is None or not password or not user.check_password(password):
            return None
        return user

    def _find(self, email: str) -> User | None:
        if not email:
            return None
        return User.query.filter(func.lower(User.email) == email).first()

    def _validate_password(self, password: str | None) -> None:
        if password is None or len(password) < self.min_password_length:
            logger.warning("Password validation failed: too short")
            raise InvalidInput(
                f"Password must be at least {self.min_password_length} characters long."
            )
