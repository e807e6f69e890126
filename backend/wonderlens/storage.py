from __future__ import annotations

import base64
import binascii
import random
import re
import time
from typing import Optional

import boto3

from .config import settings
from .exceptions import StorageError
from .logger import logger


s3 = boto3.client(
    "s3",
    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
    region_name=settings.AWS_REGION_NAME,
    endpoint_url=settings.AWS_ENDPOINT_URL,
)

_DATA_URL = re.compile(r"^data:([A-Za-z-+/]+);base64,(.+)$", re.S)


def base64_to_bytes(image: str) -> bytes:
    """Decode a base64 payload, stripping a data-URL prefix if present."""
    m = _DATA_URL.match(image)
    b64 = m.group(2) if m else image
    try:
        return base64.b64decode(b64, validate=False)
    except (binascii.Error, ValueError) as e:
        raise StorageError("Invalid base64 image payload", details=str(e))


def scan_image_key(user_id: Optional[str] = None) -> str:
    timestamp = int(time.time() * 1000)
    salt = random.randrange(1_000_000)
    return f"{user_id or 'anonymous'}_{timestamp}_{salt}.jpg"


def public_url(key: str) -> str:
    if settings.S3_PUBLIC_BASE_URL:
        return f"{settings.S3_PUBLIC_BASE_URL.rstrip('/')}/{key}"
    if settings.AWS_ENDPOINT_URL:
        return f"{settings.AWS_ENDPOINT_URL.rstrip('/')}/{settings.S3_BUCKET_NAME}/{key}"
    return f"https://{settings.S3_BUCKET_NAME}.s3.{settings.AWS_REGION_NAME}.amazonaws.com/{key}"


def get_public_url(path: Optional[str]) -> Optional[str]:
    """Normalize a stored image reference into something a browser can load."""
    if not path:
        return None
    if path.startswith("http") or path.startswith("data:"):
        return path
    return public_url(path)


def upload_scan_image(image: str, user_id: Optional[str] = None) -> str:
    """
    Upload a base64 scan image as JPEG and return its public URL.

    Keys are never overwritten; a collision surfaces as a StorageError.
    """
    body = base64_to_bytes(image)
    key = scan_image_key(user_id)
    try:
        s3.put_object(
            Bucket=settings.S3_BUCKET_NAME,
            Key=key,
            Body=body,
            ContentType="image/jpeg",
            IfNoneMatch="*",
        )
    except Exception as e:
        logger.error(f"Failed to upload scan image to S3: {e}", extra={"key": key})
        raise StorageError("Failed to upload image", details=str(e))

    logger.info("Uploaded scan image", extra={"key": key, "size_bytes": len(body)})
    return public_url(key)
