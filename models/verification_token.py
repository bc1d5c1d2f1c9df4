"""VerificationToken model definition."""

from datetime import datetime

from . import db, utcnow


class VerificationToken(db.Model):
    """A single-use email verification token issued to a user."""

    __tablename__ = "user_verifications"

    token = db.Column(db.String(36), primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    expiry_time = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship(
        "User",
        backref=db.backref("verification_tokens", lazy="dynamic"),
    )

    def is_expired(self, now: datetime) -> bool:
        """Return True once ``now`` is strictly past the expiry time."""

        return now > self.expiry_time

    def __repr__(self) -> str:
        return (
            f"<VerificationToken user_id={self.user_id} verified={self.verified}>"
        )
