"""Normalized in-memory image representation shared by requests and history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from modules.utils.image_utils import (
    ALLOWED_MIME_TYPES,
    detect_mime_type,
    encode_base64,
    parse_data_url,
    to_data_url,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImageAsset:
    """An uploaded or generated image.

    ``raw_base64`` and ``preview_url`` are derived from ``data`` and
    ``mime_type`` on construction, so the three encodings can never disagree.
    """

    data: bytes
    mime_type: str
    name: str = field(default="image", compare=False)
    raw_base64: str = field(init=False, repr=False, compare=False)
    preview_url: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.data:
            raise ValueError("Image payload is empty.")
        if self.mime_type not in ALLOWED_MIME_TYPES:
            raise ValueError(f"Unsupported MIME type '{self.mime_type}'.")
        raw = encode_base64(self.data)
        object.__setattr__(self, "raw_base64", raw)
        object.__setattr__(self, "preview_url", to_data_url(self.mime_type, raw))

    @classmethod
    def from_bytes(
        cls, data: bytes, mime_type: Optional[str] = None, name: str = "image"
    ) -> "ImageAsset":
        """Decode raw bytes, trusting the sniffed format over the declared one."""
        detected = detect_mime_type(data)
        if mime_type and mime_type != detected:
            logger.debug("Declared MIME type %s differs from sniffed %s", mime_type, detected)
        return cls(data=bytes(data), mime_type=detected, name=name)

    @classmethod
    def from_path(cls, path: str | Path) -> "ImageAsset":
        file_path = Path(path)
        return cls.from_bytes(file_path.read_bytes(), name=file_path.name)

    @classmethod
    def from_data_url(cls, data_url: str, name: str = "generated-image") -> "ImageAsset":
        """Round-trip a display preview back into an asset."""
        declared, payload = parse_data_url(data_url)
        return cls.from_bytes(payload, mime_type=declared, name=name)

    @property
    def extension(self) -> str:
        return self.mime_type.split("/", 1)[1]
