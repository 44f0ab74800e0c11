"""Receipt image loading from base64 payloads or remote URLs."""
from __future__ import annotations

import base64
import logging
import re
from typing import Optional

import requests

LOGGER = logging.getLogger(__name__)

FETCH_TIMEOUT = 30

_WHITESPACE = re.compile(r"[ \t\r\n\f\v]+")


class ImageFetchError(RuntimeError):
    """Raised when the receipt image cannot be retrieved."""


class ImageDecodeError(RuntimeError):
    """Raised when the receipt image payload cannot be decoded."""


def _strip_data_url(payload: str) -> str:
    trimmed = payload.strip()
    if trimmed.startswith("data:") and "," in trimmed:
        return trimmed.split(",", 1)[1]
    return trimmed


def _decode_base64(payload: str) -> bytes:
    # Line-wrapped payloads (MIME, Android Base64.DEFAULT) are accepted.
    compact = _WHITESPACE.sub("", _strip_data_url(payload))
    try:
        return base64.b64decode(compact, validate=True)
    except ValueError as exc:
        raise ImageDecodeError("invalid_base64") from exc


def _fetch(url: str) -> bytes:
    try:
        response = requests.get(url, timeout=FETCH_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        LOGGER.error("Failed to fetch receipt image %s: %s", url, exc)
        raise ImageFetchError("fetch_failed") from exc
    return response.content


def load_image(
    photo: Optional[str] = None,
    image_url: Optional[str] = None,
    *,
    max_bytes: Optional[int] = None,
) -> bytes:
    """Return the raw image bytes from ``photo`` (base64) or ``image_url``.

    ``photo`` wins when both are given.
    """

    if photo:
        data = _decode_base64(photo)
    elif image_url:
        trimmed = image_url.strip()
        if not (trimmed.startswith("http://") or trimmed.startswith("https://")):
            raise ImageFetchError("unsupported_url")
        data = _fetch(trimmed)
    else:
        raise ImageDecodeError("missing_image")

    if not data:
        raise ImageDecodeError("empty_image")
    if max_bytes is not None and len(data) > max_bytes:
        raise ImageDecodeError("image_too_large")
    return data


__all__ = ["ImageDecodeError", "ImageFetchError", "load_image"]
