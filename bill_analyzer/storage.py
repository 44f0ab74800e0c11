"""S3 object storage for uploaded receipt images."""
from __future__ import annotations

import logging
import uuid
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .settings import Settings

LOGGER = logging.getLogger(__name__)

IMAGE_CONTENT_TYPE = "image/jpeg"


class StorageError(RuntimeError):
    """Raised when S3 operations fail."""


@lru_cache()
def _s3_client(settings: Settings) -> Any:
    return boto3.client(
        "s3",
        region_name=settings.aws_region,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )


def generate_object_key() -> str:
    return f"{uuid.uuid4()}.jpg"


def upload_image(data: bytes, key: str, *, settings: Settings) -> str:
    """Store ``data`` under ``key`` in the configured bucket and return the key."""

    try:
        _s3_client(settings).put_object(
            Bucket=settings.s3_bucket_name,
            Key=key,
            Body=data,
            ContentType=IMAGE_CONTENT_TYPE,
        )
    except (ClientError, BotoCoreError) as exc:
        LOGGER.error("Error uploading %s to S3: %s", key, exc)
        raise StorageError("upload_failed") from exc
    LOGGER.info("Uploaded receipt image to s3://%s/%s", settings.s3_bucket_name, key)
    return key


def download_image(key: str, *, settings: Settings) -> bytes:
    try:
        response = _s3_client(settings).get_object(Bucket=settings.s3_bucket_name, Key=key)
        return response["Body"].read()
    except (ClientError, BotoCoreError) as exc:
        LOGGER.error("Error getting %s from S3: %s", key, exc)
        raise StorageError("download_failed") from exc


__all__ = ["StorageError", "download_image", "generate_object_key", "upload_image"]
