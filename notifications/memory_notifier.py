"""In-process notifier used for local development and tests."""

from __future__ import annotations

import logging
from collections import deque

from .abstract_notifier import AbstractNotifier

logger = logging.getLogger(__name__)


class InMemoryNotifier(AbstractNotifier):
    """Keep the most recent published messages instead of sending them anywhere."""

    def __init__(self, max_messages: int = 1000):
        self.messages: deque[dict[str, str | None]] = deque(maxlen=max_messages)

    def publish_verification(self, email: str, first_name: str | None, token: str) -> None:
        self.messages.append(self.build_message(email, first_name, token))
        logger.info("Verification message queued in memory for %s", email)

    def last_token_for(self, email: str) -> str | None:
        for message in reversed(self.messages):
            if message["email"] == email:
                return message["verificationToken"]
        return None
