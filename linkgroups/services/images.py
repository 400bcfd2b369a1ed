"""Thumbnail uploads to S3-compatible object storage."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

import boto3
from flask import current_app
from werkzeug.datastructures import FileStorage

from linkgroups.services.common import ServiceError

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

_clients: dict[tuple, object] = {}


class ImageRejected(ServiceError):
    status_code = 400


class InvalidImageType(ImageRejected):
    status_code = 400


class ImageTooLarge(ImageRejected):
    status_code = 413


@dataclass
class UploadResult:
    url: str
    key: str


@dataclass
class PendingImage:
    data: bytes
    content_type: str
    filename: str


def _storage_client():
    config = current_app.config
    cache_key = (
        config.get("AWS_REGION"),
        config.get("S3_ENDPOINT_URL"),
        config.get("AWS_ACCESS_KEY_ID"),
    )
    client = _clients.get(cache_key)
    if client is None:
        session = boto3.session.Session()
        client = session.client(
            service_name="s3",
            region_name=config.get("AWS_REGION"),
            aws_access_key_id=config.get("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=config.get("AWS_SECRET_ACCESS_KEY"),
            endpoint_url=config.get("S3_ENDPOINT_URL"),
        )
        _clients[cache_key] = client
    return client


def validate_image(upload: FileStorage | None) -> PendingImage | None:
    """Check type and size of an uploaded file and read it into memory.

    Returns ``None`` when no file was attached. Nothing is written anywhere
    here, so callers can reject the request before touching storage or rows.
    """
    if upload is None or not upload.filename:
        return None

    content_type = (upload.mimetype or "").lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidImageType(
            "Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed."
        )

    max_bytes = current_app.config["MAX_IMAGE_BYTES"]
    data = upload.stream.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ImageTooLarge(f"File too large. Maximum size is {max_bytes} bytes.")

    return PendingImage(data=data, content_type=content_type, filename=upload.filename)


def build_key(filename: str, owner_email: str) -> str:
    env = "prod" if current_app.config.get("IS_PRODUCTION") else "dev"
    ext = filename.rsplit(".", 1)[-1] if "." in filename else ""
    name = f"{uuid.uuid4()}.{ext}" if ext else str(uuid.uuid4())
    return f"{env}/{owner_email}/{name}"


def public_url(key: str) -> str:
    config = current_app.config
    base = (config.get("IMAGE_PUBLIC_BASE_URL") or "").rstrip("/")
    if base:
        return f"{base}/{key}"
    bucket = config["AWS_S3_BUCKET"]
    region = config["AWS_REGION"]
    return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"


def store_image(image: PendingImage, owner_email: str) -> UploadResult:
    key = build_key(image.filename, owner_email)
    _storage_client().put_object(
        Bucket=current_app.config["AWS_S3_BUCKET"],
        Key=key,
        Body=image.data,
        ContentType=image.content_type,
    )
    current_app.logger.info("stored image %s (%s bytes)", key, len(image.data))
    return UploadResult(url=public_url(key), key=key)


def delete_image(key: str) -> None:
    _storage_client().delete_object(Bucket=current_app.config["AWS_S3_BUCKET"], Key=key)
