"""Verification notification channels."""

from .abstract_notifier import AbstractNotifier, NotificationError
from .memory_notifier import InMemoryNotifier
from .sns_notifier import SnsNotifier

__all__ = ["AbstractNotifier", "NotificationError", "InMemoryNotifier", "SnsNotifier"]
