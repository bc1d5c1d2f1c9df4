"""Storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO


class StorageError(Exception):
    """Raised when a storage backend fails to read, write or delete an object."""


class AbstractStorage(ABC):
    """Interface for object storage backends keyed by a relative object key."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> None:
        """Write ``data`` under ``key`` with content-type and length metadata."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the object stored under ``key``."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return whether an object is stored under ``key``."""

    @abstractmethod
    def open(self, key: str) -> BinaryIO:
        """Open a stored object for reading."""

    @abstractmethod
    def location(self, key: str) -> str:
        """Return the location recorded in image views for ``key``."""
