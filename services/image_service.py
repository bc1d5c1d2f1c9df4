"""Profile picture storage with a replace-on-upload policy.

A user owns at most one image. Replacing it writes the new object first,
swaps the metadata rows in one transaction and only then removes the old
object, so a failure at any step leaves the stored metadata pointing at an
object that exists.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage

from models import db, utcnow
from models.user import User
from models.user_image import ALLOWED_IMAGE_TYPES, UserImage
from storage import AbstractStorage, StorageError

from .errors import Internal, InvalidInput, NotFound
from .metrics import MetricsCollector

logger = logging.getLogger(__name__)

EXTENSIONS_BY_TYPE = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
}


def _file_extension(filename: str | None, content_type: str) -> str:
    suffix = Path(filename or "").suffix.lower()
    if suffix in {".jpg", ".jpeg", ".png"}:
        return suffix
    return EXTENSIONS_BY_TYPE[content_type]


class ImageService:
    """Upload, fetch and delete the single per-user image."""

    def __init__(self, storage: AbstractStorage, metrics: MetricsCollector):
        self.storage = storage
        self.metrics = metrics

    def get_image(self, user_id: int) -> dict:
        logger.info("Fetching image for user ID: %s", user_id)
        return self.to_view(self._get_or_404(user_id))

    def upload_image(self, file: FileStorage, user: User) -> dict:
        """Store ``file`` as the user's image, replacing any previous one."""

        logger.info("Starting image upload for user ID: %s", user.id)
        data = file.read()
        content_type = (file.mimetype or "").lower()

        if not data:
            logger.error("Empty file received from user ID: %s", user.id)
            raise InvalidInput("File cannot be empty.")
        if content_type not in ALLOWED_IMAGE_TYPES:
            logger.error("Invalid file type received from user ID: %s: %s", user.id, content_type)
            raise InvalidInput("Invalid file type. Only JPEG, JPG, and PNG are allowed.")

        existing = UserImage.query.filter_by(user_id=user.id).first()
        if (
            existing is not None
            and existing.size == len(data)
            and existing.content_type == content_type
        ):
            logger.warning("User ID: %s attempting to upload potentially duplicate image", user.id)
            raise InvalidInput("This image appears to be already uploaded.")

        file_name = f"{uuid.uuid4()}{_file_extension(file.filename, content_type)}"
        key = f"users/{user.id}/{file_name}"

        try:
            with self.metrics.timer("webapp.s3.operation.time", operation="put"):
                self.storage.put(key, data, content_type)
        except StorageError as exc:
            logger.error("Failed to upload image for user ID: %s. Error: %s", user.id, exc)
            raise Internal("Failed to upload image.") from exc

        image = UserImage(
            id=str(uuid.uuid4()),
            file_name=file_name,
            url=key,
            upload_date=utcnow(),
            user_id=user.id,
            content_type=content_type,
            size=len(data),
        )
        previous_key = existing.url if existing is not None else None

        try:
            if existing is not None:
                db.session.delete(existing)
                db.session.flush()
            db.session.add(image)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Failed to save image metadata for user ID: %s", user.id)
            self._discard(key)
            raise Internal("Failed to upload image.") from exc

        if previous_key is not None:
            logger.info("Deleting previous image for user ID: %s", user.id)
            self._discard(previous_key)

        self.metrics.increment("webapp.image.uploads")
        self.metrics.gauge("image.upload.size", len(data))
        logger.info("Successfully uploaded image for user ID: %s", user.id)
        return self.to_view(image)

    def delete_image(self, user_id: int) -> None:
        logger.info("Attempting to delete image for user ID: %s", user_id)
        image = self._get_or_404(user_id)
        key = image.url

        try:
            db.session.delete(image)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Failed to delete image metadata for user ID: %s", user_id)
            raise Internal("Failed to delete image.") from exc

        self._discard(key)
        logger.info("Successfully deleted image for user ID: %s", user_id)

    def to_view(self, image: UserImage) -> dict:
        return {
            "id": image.id,
            "file_name": image.file_name,
            "url": self.storage.location(image.url),
            "upload_date": image.upload_date.date().isoformat(),
            "user_id": str(image.user_id),
        }

    def _get_or_404(self, user_id: int) -> UserImage:
        image = UserImage.query.filter_by(user_id=user_id).first()
        if image is None:
            logger.warning("No image found for user ID: %s", user_id)
            raise NotFound("Image not found.")
        return image

    def _discard(self, key: str) -> None:
        """Delete an object that no metadata row references any more."""

        try:
            with self.metrics.timer("webapp.s3.operation.time", operation="delete"):
                self.storage.delete(key)
        except StorageError:
            logger.exception("Orphaned object left in storage: %s", key)
            self.metrics.increment("image.orphaned")
