"""Amazon SNS notifier implementation."""

from __future__ import annotations

import json
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .abstract_notifier import AbstractNotifier, NotificationError

logger = logging.getLogger(__name__)


class SnsNotifier(AbstractNotifier):
    """Publish verification messages as JSON to an SNS topic."""

    def __init__(self, topic_arn: str, region_name: str | None = None, client: Any = None):
        if not topic_arn:
            raise RuntimeError("SNS_TOPIC_ARN is not set")
        self.topic_arn = topic_arn
        self.client = client or boto3.client("sns", region_name=region_name)

    def publish_verification(self, email: str, first_name: str | None, token: str) -> None:
        message = json.dumps(self.build_message(email, first_name, token))
        try:
            response = self.client.publish(TopicArn=self.topic_arn, Message=message)
        except (BotoCoreError, ClientError) as exc:
            raise NotificationError(f"Failed to publish verification for {email}: {exc}") from exc
        logger.info(
            "Verification email request sent for user: %s (message id %s)",
            email,
            response.get("MessageId"),
        )
