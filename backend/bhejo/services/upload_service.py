# Overview: Product image uploads; object-store backends and the 4-slot normalizer.

"""
Image upload handling for product creation.

An ImageStorage backend turns one uploaded file into a stable URI and owns
the format whitelist. normalize_images() maps up to IMAGE_SLOTS uploaded
files onto the fixed slot list stored on every product.
"""
from __future__ import annotations

import os
from typing import Iterable
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..models import IMAGE_SLOTS


IMAGE_FIELD = "images"
ALLOWED_FORMATS = frozenset({"jpeg", "png", "jpg", "gif"})


class UploadRejectedError(ValueError):
    """The storage backend refused a file (e.g. format not whitelisted)."""
    status_code = 400


class ImageStorageError(Exception):
    """The storage backend failed to persist an accepted file."""
    status_code = 502


class ImageStorage:
    """Base class for object-store backends."""

    allowed_formats = ALLOWED_FORMATS

    def save(self, upload: FileStorage) -> str:
        raise NotImplementedError

    def delete(self, uri: str) -> None:
        raise NotImplementedError

    def check(self, upload: FileStorage) -> None:
        """Raise UploadRejectedError if `upload` would be refused by save()."""
        self._extension_for(upload)

    def _extension_for(self, upload: FileStorage) -> str:
        filename = secure_filename(upload.filename or "")
        extension = os.path.splitext(filename)[1].lower().lstrip(".")
        if extension not in self.allowed_formats:
            allowed = ", ".join(sorted(self.allowed_formats))
            raise UploadRejectedError(
                f"Unsupported image format for {upload.filename!r}. Allowed formats: {allowed}"
            )
        return extension

    def _object_name(self, upload: FileStorage) -> str:
        return f"{uuid4().hex}.{self._extension_for(upload)}"


class LocalImageStorage(ImageStorage):
    """Writes uploads to a folder served back under `url_prefix`."""

    def __init__(self, folder: str, url_prefix: str = "/uploads"):
        self.folder = folder
        self.url_prefix = url_prefix.rstrip("/")

    def save(self, upload: FileStorage) -> str:
        name = self._object_name(upload)
        os.makedirs(self.folder, exist_ok=True)
        try:
            upload.save(os.path.join(self.folder, name))
        except OSError as e:
            raise ImageStorageError("Could not store the uploaded image") from e
        return f"{self.url_prefix}/{name}"

    def delete(self, uri: str) -> None:
        name = os.path.basename(uri)
        try:
            os.remove(os.path.join(self.folder, name))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise ImageStorageError("Could not delete the stored image") from e


class S3ImageStorage(ImageStorage):
    """Uploads to an S3 bucket and returns the object's public URL."""

    def __init__(
        self,
        bucket: str,
        *,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        region: str | None = None,
        public_base_url: str | None = None,
        folder: str = "uploads",
        client=None,
    ):
        self.bucket = bucket
        self.folder = folder.strip("/")
        self.region = region
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
        )

    def _public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def save(self, upload: FileStorage) -> str:
        key = f"{self.folder}/{self._object_name(upload)}"
        try:
            self.client.upload_fileobj(
                upload.stream,
                self.bucket,
                key,
                ExtraArgs={"ContentType": upload.mimetype or "application/octet-stream"},
            )
        except (BotoCoreError, ClientError) as e:
            raise ImageStorageError("Could not store the uploaded image") from e
        return self._public_url(key)

    def delete(self, uri: str) -> None:
        key = f"{self.folder}/{os.path.basename(uri)}"
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise ImageStorageError("Could not delete the stored image") from e


def storage_from_config(config, instance_path: str) -> ImageStorage:
    backend = (config.get("IMAGE_STORAGE") or "local").lower()
    if backend == "s3":
        bucket = config.get("S3_BUCKET")
        if not bucket:
            raise RuntimeError("IMAGE_STORAGE=s3 requires S3_BUCKET")
        return S3ImageStorage(
            bucket,
            access_key_id=config.get("S3_ACCESS_KEY_ID"),
            secret_access_key=config.get("S3_SECRET_ACCESS_KEY"),
            region=config.get("S3_REGION"),
            public_base_url=config.get("S3_PUBLIC_BASE_URL"),
        )
    if backend == "local":
        folder = config.get("UPLOAD_FOLDER") or os.path.join(instance_path, "uploads")
        return LocalImageStorage(folder)
    raise RuntimeError(f"Unknown IMAGE_STORAGE backend: {backend}")


def init_app(app) -> None:
    app.extensions["image_storage"] = storage_from_config(app.config, app.instance_path)


def get_image_storage() -> ImageStorage:
    return current_app.extensions["image_storage"]


def normalize_images(
    uploads: Iterable[FileStorage],
    storage: ImageStorage,
    placeholder: str,
) -> list[str]:
    """
    Store up to IMAGE_SLOTS uploads and return exactly IMAGE_SLOTS URIs.

    Slot i holds the URI of the i-th uploaded file. Missing slot 0 falls
    back to `placeholder`, missing slots 1-3 to "". Empty file parts are
    skipped and anything past the fourth file is ignored.

    Every file is checked before any is saved, so a rejected file leaves
    nothing behind. If a save fails, files saved so far are discarded.
    """
    present = [u for u in uploads if u is not None and u.filename][:IMAGE_SLOTS]
    for upload in present:
        storage.check(upload)

    slots = [placeholder] + [""] * (IMAGE_SLOTS - 1)
    try:
        for index, upload in enumerate(present):
            slots[index] = storage.save(upload)
    except ImageStorageError:
        discard_images(storage, slots[:index])
        raise
    return slots


def discard_images(storage: ImageStorage, uris: Iterable[str]) -> None:
    """Best-effort removal of stored images that no product references."""
    for uri in uris:
        if not uri:
            continue
        try:
            storage.delete(uri)
        except ImageStorageError:
            current_app.logger.warning(f"Could not discard stored image {uri}")
