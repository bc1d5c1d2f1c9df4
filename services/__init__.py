"""Account services and the collaborators they are built from."""

from __future__ import annotations

from flask import Flask, current_app

from notifications import AbstractNotifier, InMemoryNotifier, SnsNotifier
from storage import AbstractStorage, LocalStorage, S3Storage

from .image_service import ImageService
from .metrics import CloudWatchMetrics, InMemoryMetrics, MetricsCollector
from .user_service import UserService
from .verification_service import VerificationOutcome, VerificationService

EXTENSION_KEY = "account_services"


class AccountServices:
    """Container for the services of one application instance."""

    def __init__(
        self,
        storage: AbstractStorage,
        notifier: AbstractNotifier,
        metrics: MetricsCollector,
        expiry_minutes: int = 30,
        min_password_length: int = 8,
    ):
        self.storage = storage
        self.notifier = notifier
        self.metrics = metrics
        self.verification = VerificationService(notifier, metrics, expiry_minutes)
        self.users = UserService(self.verification, metrics, min_password_length)
        self.images = ImageService(storage, metrics)


def build_storage(config) -> AbstractStorage:
    backend = (config.get("STORAGE_BACKEND") or "local").lower()
    if backend == "s3":
        return S3Storage(config.get("S3_BUCKET_NAME"), region_name=config.get("AWS_REGION"))
    if backend == "local":
        return LocalStorage(
            config["UPLOAD_DIR"], base_url=config.get("LOCAL_STORAGE_BASE_URL")
        )
    raise RuntimeError(f"Unknown STORAGE_BACKEND: {backend}")


def build_notifier(config) -> AbstractNotifier:
    backend = (config.get("NOTIFIER_BACKEND") or "memory").lower()
    if backend == "sns":
        return SnsNotifier(config.get("SNS_TOPIC_ARN"), region_name=config.get("AWS_REGION"))
    if backend == "memory":
        return InMemoryNotifier()
    raise RuntimeError(f"Unknown NOTIFIER_BACKEND: {backend}")


def build_metrics(config) -> MetricsCollector:
    backend = (config.get("METRICS_BACKEND") or "memory").lower()
    if backend == "cloudwatch":
        return CloudWatchMetrics(
            config.get("METRICS_NAMESPACE", "webapp"),
            region_name=config.get("AWS_REGION"),
            step_seconds=float(config.get("METRICS_STEP_SECONDS", 60)),
        )
    if backend == "memory":
        return InMemoryMetrics()
    raise RuntimeError(f"Unknown METRICS_BACKEND: {backend}")


def init_services(app: Flask) -> AccountServices:
    """Build the services from the app config and attach them to ``app``."""

    services = AccountServices(
        storage=build_storage(app.config),
        notifier=build_notifier(app.config),
        metrics=build_metrics(app.config),
        expiry_minutes=int(app.config.get("VERIFICATION_EXPIRY_MINUTES", 30)),
        min_password_length=int(app.config.get("MIN_PASSWORD_LENGTH", 8)),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> AccountServices:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "AccountServices",
    "ImageService",
    "UserService",
    "VerificationOutcome",
    "VerificationService",
    "get_services",
    "init_services",
]
