"""Shared dataclass models for request attachments and bodies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Iterator


@dataclass
class File:
    """An attachment to upload alongside a JSON payload.

    The caller owns ``reader``; it is read once and never closed here.
    An empty ``content_type`` means unspecified.
    """

    name: str
    reader: BinaryIO
    content_type: str = ""


@dataclass(frozen=True)
class MultipartBody:
    """A fully assembled multipart/form-data request body."""

    content_type: str
    body: bytes

    def __iter__(self) -> Iterator[object]:
        yield self.content_type
        yield self.body
