"""Amazon S3 storage implementation."""

from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .abstract_storage import AbstractStorage, StorageError

logger = logging.getLogger(__name__)


class S3Storage(AbstractStorage):
    """Persist objects to a single S3 bucket."""

    def __init__(self, bucket: str, region_name: str | None = None, client: Any = None):
        if not bucket:
            raise RuntimeError("S3_BUCKET_NAME is not set")
        self.bucket = bucket
        self.client = client or boto3.client("s3", region_name=region_name)
        logger.info("S3 storage initialized with bucket: %s", bucket)

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                ContentLength=len(data),
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in {"404", "NoSuchKey", "NotFound"}:
                return False
            raise StorageError(f"Failed to look up {key}: {exc}") from exc
        return True

    def open(self, key: str) -> BinaryIO:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to read {key}: {exc}") from exc
        return io.BytesIO(response["Body"].read())

    def location(self, key: str) -> str:
        return f"{self.bucket}/{key}"
