"""Application configuration module."""

import os
from pathlib import Path


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///app.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", 10 * 1024 * 1024))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_PATH = os.getenv("LOG_PATH")

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Rate limiting
    RATE_LIMIT = os.getenv("RATE_LIMIT", "60 per minute")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_KEY_PREFIX = os.getenv("RATELIMIT_KEY_PREFIX", "")

    # Accounts
    MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", 8))
    VERIFICATION_EXPIRY_MINUTES = int(os.getenv("VERIFICATION_EXPIRY_MINUTES", 30))

    # AWS
    AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

    # Image storage: "s3" or "local"
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local")
    S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME")
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", str(Path("workspace") / "uploads"))
    # Public prefix for local objects, e.g. a static file server in front of UPLOAD_DIR
    LOCAL_STORAGE_BASE_URL = os.getenv("LOCAL_STORAGE_BASE_URL")

    # Verification notifications: "sns" or "memory"
    NOTIFIER_BACKEND = os.getenv("NOTIFIER_BACKEND", "memory")
    SNS_TOPIC_ARN = os.getenv("SNS_TOPIC_ARN")

    # Metrics: "cloudwatch" or "memory"
    METRICS_BACKEND = os.getenv("METRICS_BACKEND", "memory")
    METRICS_NAMESPACE = os.getenv("METRICS_NAMESPACE", "webapp")
    METRICS_STEP_SECONDS = float(os.getenv("METRICS_STEP_SECONDS", "60"))
