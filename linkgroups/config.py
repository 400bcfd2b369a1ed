import os
from datetime import timedelta
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


def _csv(value: str | None) -> list[str]:
    return [item.strip().lower() for item in (value or "").split(",") if item.strip()]


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "default-secret-key")
    APP_ENV = os.environ.get("APP_ENV", "development")
    IS_PRODUCTION = APP_ENV == "production"
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'linkgroups.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    SESSION_COOKIE_NAME = "sessionId"
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = IS_PRODUCTION
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = "Lax"
    REMEMBER_COOKIE_SECURE = IS_PRODUCTION
    REMEMBER_COOKIE_DURATION = timedelta(days=30)
    PERMANENT_SESSION_LIFETIME = timedelta(days=30)

    GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID", "")
    GOOGLE_CLIENT_SECRET = os.environ.get("GOOGLE_CLIENT_SECRET", "")
    GOOGLE_CALLBACK_URL = os.environ.get("GOOGLE_CALLBACK_URL")
    GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"
    FRONTEND_URL = os.environ.get("FRONTEND_URL")
    # CORS origin for the dev server when FRONTEND_URL is unset
    DEV_FRONTEND_URL = "http://localhost:3000"
    ADMIN_EMAILS = _csv(os.environ.get("ADMIN_EMAILS"))

    AWS_S3_BUCKET = os.environ.get("AWS_S3_BUCKET", "")
    AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
    AWS_ACCESS_KEY_ID = os.environ.get("AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY = os.environ.get("AWS_SECRET_ACCESS_KEY")
    S3_ENDPOINT_URL = os.environ.get("S3_ENDPOINT_URL")
    IMAGE_PUBLIC_BASE_URL = os.environ.get("IMAGE_PUBLIC_BASE_URL")
    MAX_IMAGE_BYTES = int(os.environ.get("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))
    # multipart overhead on top of the image itself
    MAX_CONTENT_LENGTH = MAX_IMAGE_BYTES + 1024 * 1024

    UNDO_WINDOW_SECONDS = int(os.environ.get("UNDO_WINDOW_SECONDS", "5"))


class TestConfig(Config):
    TESTING = True
    APP_ENV = "test"
    IS_PRODUCTION = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False
    GOOGLE_CLIENT_ID = "test-client-id"
    GOOGLE_CLIENT_SECRET = "test-client-secret"
    FRONTEND_URL = None
    ADMIN_EMAILS = ["admin@example.com"]
    AWS_S3_BUCKET = "linkgroups-test"
    AWS_REGION = "us-east-1"
    IMAGE_PUBLIC_BASE_URL = None
