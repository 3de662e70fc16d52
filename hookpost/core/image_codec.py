"""Image sniffing and data URI helpers for avatar and icon fields."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from hookpost.core.errors import UnsupportedImageTypeError

logger = logging.getLogger(__name__)

# Length needed by the deepest check (WEBP reads bytes 8-11).
MIN_HEADER_LENGTH = 12


@dataclass(frozen=True)
class ImageSignature:
    """Magic byte checks that identify one image format."""

    mime_type: str
    checks: Tuple[Tuple[int, bytes], ...]
    require_all: bool = False

    def matches(self, data: bytes) -> bool:
        results = (data[offset : offset + len(expected)] == expected for offset, expected in self.checks)
        return all(results) if self.require_all else any(results)


IMAGE_SIGNATURES: Tuple[ImageSignature, ...] = (
    ImageSignature("image/png", ((0, b"\x89PNG\r\n\x1a\n"),)),
    ImageSignature("image/jpeg", ((0, b"\xff\xd8\xff"), (6, b"JFIF"), (6, b"Exif"))),
    ImageSignature("image/gif", ((0, b"GIF87a"), (0, b"GIF89a"))),
    ImageSignature("image/webp", ((0, b"RIFF"), (8, b"WEBP")), require_all=True),
)


@dataclass
class ImagePayload:
    """Container for image bytes and metadata."""

    data: bytes
    filename: str
    mime_type: str


def detect_image_mime_type(data: bytes) -> str:
    """Return the MIME type for PNG, JPEG, GIF or WEBP bytes."""
    if len(data) < MIN_HEADER_LENGTH:
        raise UnsupportedImageTypeError(
            f"unsupported image type: need at least {MIN_HEADER_LENGTH} bytes, got {len(data)}"
        )
    for signature in IMAGE_SIGNATURES:
        if signature.matches(data):
            logger.debug("Detected %s from image header", signature.mime_type)
            return signature.mime_type
    raise UnsupportedImageTypeError()


def encode_image_to_data_uri(data: bytes) -> str:
    """Return a base64 data URI for supported image bytes."""
    mime_type = detect_image_mime_type(data)
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def load_image(path: str | Path) -> ImagePayload:
    """Load an image from disk and sniff its type."""
    file_path = Path(path)
    data = file_path.read_bytes()
    mime_type = detect_image_mime_type(data)
    return ImagePayload(data=data, filename=file_path.name, mime_type=mime_type)


def encode_image_file_to_data_uri(path: str | Path) -> str:
    """Return a base64 data URI for a supported image file."""
    return encode_image_to_data_uri(load_image(path).data)
