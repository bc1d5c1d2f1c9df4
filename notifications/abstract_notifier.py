"""Notifier abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod


class NotificationError(Exception):
    """Raised when a verification message could not be published."""


class AbstractNotifier(ABC):
    """Interface for fire-and-forget verification message publishers."""

    @abstractmethod
    def publish_verification(self, email: str, first_name: str | None, token: str) -> None:
        """Publish a verification request for ``email`` carrying ``token``."""

    @staticmethod
    def build_message(email: str, first_name: str | None, token: str) -> dict[str, str | None]:
        return {
            "email": email,
            "firstName": first_name,
            "verificationToken": token,
        }
