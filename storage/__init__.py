"""Storage backends."""

from .abstract_storage import AbstractStorage, StorageError
from .local_storage import LocalStorage
from .s3_storage import S3Storage

__all__ = ["AbstractStorage", "StorageError", "LocalStorage", "S3Storage"]
