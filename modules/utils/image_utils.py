"""Utility helpers for image decoding and display conversion."""

from __future__ import annotations

import base64
import binascii
import io
from typing import Any, Tuple

from PIL import Image, UnidentifiedImageError

SUPPORTED_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    # multi-picture JPEG written by many phone cameras
    "MPO": "image/jpeg",
    "WEBP": "image/webp",
}
ALLOWED_MIME_TYPES = frozenset(SUPPORTED_MIME_TYPES.values())


def detect_mime_type(data: bytes) -> str:
    """Return the MIME type of an encoded image, validating it with Pillow."""
    if not data:
        raise ValueError("Image payload is empty.")
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = (image.format or "").upper()
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValueError(f"Unsupported or corrupt image data: {exc}") from exc

    mime_type = SUPPORTED_MIME_TYPES.get(image_format)
    if mime_type is None:
        raise ValueError(f"Unsupported image format '{image_format or 'unknown'}'.")
    return mime_type


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def to_data_url(mime_type: str, raw_base64: str) -> str:
    """Build a self-contained data URI usable directly for display."""
    return f"data:{mime_type};base64,{raw_base64}"


def parse_data_url(data_url: str) -> Tuple[str, bytes]:
    """Split a base64 data URI into ``(mime_type, payload bytes)``."""
    if not data_url.startswith("data:") or "," not in data_url:
        raise ValueError("Not a data URI.")
    header, encoded = data_url[5:].split(",", 1)
    parts = header.split(";")
    if "base64" not in parts[1:]:
        raise ValueError("Only base64 data URIs are supported.")
    try:
        payload = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc
    return parts[0] or "application/octet-stream", payload


def to_pil(data: bytes) -> Any:
    """Decode image bytes into a loaded PIL image for display widgets."""
    image = Image.open(io.BytesIO(data))
    image.load()
    return image
