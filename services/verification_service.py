"""Email verification token lifecycle.

A token is *pending* from issuance until it is either consumed (``verified``
flips to true, terminal) or its expiry time passes (terminal, never stored).
Consumption is exactly-once: the flip is a conditional update so a second
consumer, concurrent or not, observes zero changed rows and is refused.
"""

from __future__ import annotations

import enum
import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from models import db, utcnow
from models.user import User
from models.verification_token import VerificationToken
from notifications import AbstractNotifier, NotificationError

from .errors import VerificationDispatchError
from .metrics import MetricsCollector

logger = logging.getLogger(__name__)


class VerificationOutcome(str, enum.Enum):
    """Result of an attempt to consume a verification token."""

    CONSUMED = "consumed"
    ALREADY_CONSUMED = "already_consumed"
    EXPIRED = "expired"
    UNKNOWN = "unknown"
    FAILED = "failed"


class VerificationService:
    """Issue and consume single-use email verification tokens."""

    def __init__(
        self,
        notifier: AbstractNotifier,
        metrics: MetricsCollector,
        expiry_minutes: int = 30,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.notifier = notifier
        self.metrics = metrics
        self.expiry_minutes = expiry_minutes
        self.clock = clock

    def issue_token(self, user: User) -> VerificationToken:
        """Persist a new pending token for ``user`` and publish it.

        The token row is flushed, not committed; the caller owns the
        transaction. Persistence and publishing failures are both reported as
        :class:`VerificationDispatchError`.
        """

        now = self.clock()
        record = VerificationToken(
            token=str(uuid.uuid4()),
            user=user,
            verified=False,
            expiry_time=now + timedelta(minutes=self.expiry_minutes),
            created_at=now,
        )

        try:
            db.session.add(record)
            db.session.flush()
            self.notifier.publish_verification(user.email, user.first_name, record.token)
        except (SQLAlchemyError, NotificationError) as exc:
            logger.exception("Failed to send verification email for user: %s", user.email)
            self.metrics.increment("verification.dispatch.failed")
            raise VerificationDispatchError() from exc

        self.metrics.increment("verification.issued")
        logger.info("Verification email request sent for user: %s", user.email)
        return record

    def verify_token(self, token: str | None) -> VerificationOutcome:
        """Consume ``token`` and report why it did or did not verify the user.

        Checks run in order: existence, already consumed, expiry.
        """

        try:
            outcome = self._verify(token)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Verification failed for token: %s", token)
            outcome = VerificationOutcome.FAILED

        if outcome is VerificationOutcome.CONSUMED:
            self.metrics.increment("verification.consumed")
        else:
            self.metrics.increment("verification.failed", outcome=outcome.value)
            logger.warning("Verification failed for token %s: %s", token, outcome.value)
        return outcome

    def consume_token(self, token: str | None) -> bool:
        """Return True only when this call verified the token's user."""

        return self.verify_token(token) is VerificationOutcome.CONSUMED

    def _verify(self, token: str | None) -> VerificationOutcome:
        record = db.session.get(VerificationToken, token) if token else None
        if record is None:
            return VerificationOutcome.UNKNOWN
        if record.verified:
            return VerificationOutcome.ALREADY_CONSUMED
        if record.is_expired(self.clock()):
            return VerificationOutcome.EXPIRED

        result = db.session.execute(
            update(VerificationToken)
            .where(
                VerificationToken.token == record.token,
                VerificationToken.verified.is_(False),
            )
            .values(verified=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.session.rollback()
            return VerificationOutcome.ALREADY_CONSUMED

        user = record.user
        user.verified = True
        db.session.commit()
        logger.info("User verified successfully: %s", user.email)
        return VerificationOutcome.CONSUMED
