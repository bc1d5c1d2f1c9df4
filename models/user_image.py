"""UserImage model definition."""

from . import db, utcnow


ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png")


class UserImage(db.Model):
    """Metadata for the single profile picture a user may own."""

    __tablename__ = "user_images"

    id = db.Column(db.String(36), primary_key=True)
    file_name = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(512), nullable=False)
    upload_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        unique=True,
    )
    content_type = db.Column(db.String(128), nullable=False)
    size = db.Column(db.BigInteger, nullable=False)

    user = db.relationship(
        "User",
        backref=db.backref("image", uselist=False),
    )

    def __repr__(self) -> str:
        return f"<UserImage id={self.id} user_id={self.user_id}>"
