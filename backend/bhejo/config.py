# backend/bhejo/config.py
from __future__ import annotations
import os


DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5000",
    "https://bhejo.herokuapp.com/",
    "https://bhejo.herokuapp.com:3000",
    "https://bhejo.herokuapp.com:5000",
)


def _split_origins(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_ALLOWED_ORIGINS
    return tuple(o.strip() for o in raw.split(",") if o.strip())


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///bhejo.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Exact-match origin allow-list (scheme + host + port, as configured)
    CORS_ALLOWED_ORIGINS = _split_origins(os.environ.get("CORS_ALLOWED_ORIGINS"))

    # Product images
    IMAGE_STORAGE = os.environ.get("IMAGE_STORAGE", "local")
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER")  # None -> <instance>/uploads
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_UPLOAD_SIZE_MB", "16")) * 1024 * 1024
    PLACEHOLDER_IMAGE_URI = os.environ.get(
        "PLACEHOLDER_IMAGE_URI",
        "client/public/uploads/Not_available.jpg",
    )

    # Object store credentials, only read when IMAGE_STORAGE=s3
    S3_BUCKET = os.environ.get("S3_BUCKET")
    S3_ACCESS_KEY_ID = os.environ.get("S3_ACCESS_KEY_ID")
    S3_SECRET_ACCESS_KEY = os.environ.get("S3_SECRET_ACCESS_KEY")
    S3_REGION = os.environ.get("S3_REGION")
    S3_PUBLIC_BASE_URL = os.environ.get("S3_PUBLIC_BASE_URL")
