"""Local filesystem storage implementation."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO

from .abstract_storage import AbstractStorage, StorageError

logger = logging.getLogger(__name__)


class LocalStorage(AbstractStorage):
    """Persist objects to the local filesystem under the configured upload directory."""

    def __init__(self, upload_dir: str | os.PathLike[str], base_url: str | None = None):
        self.base_directory = Path(upload_dir).resolve()
        self.base_url = base_url.rstrip("/") if base_url else None
        os.makedirs(self.base_directory, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        path = (self.base_directory / key).resolve()
        if self.base_directory not in path.parents:
            raise StorageError(f"Object key escapes the upload directory: {key!r}")
        return path

    def put(self, key: str, data: bytes, content_type: str) -> None:
        destination = self._path_for(key)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write {key}: {exc}") from exc
        logger.debug("Stored %s (%s, %d bytes)", key, content_type, len(data))

    def delete(self, key: str) -> None:
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            logger.warning("Object %s already absent from local storage", key)
        except OSError as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc

    def exists(self, key: str) -> bool:
        return self._path_for(key).exists()

    def open(self, key: str) -> BinaryIO:
        return open(self._path_for(key), "rb")

    def location(self, key: str) -> str:
        """Return ``key`` under ``base_url`` when one is configured.

        Without a base URL the value is relative to the upload directory's
        parent and only meaningful on this host.
        """

        if self.base_url:
            return f"{self.base_url}/{key}"
        return f"{self.base_directory.name}/{key}"
