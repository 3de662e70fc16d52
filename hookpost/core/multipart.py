"""multipart/form-data encoding for JSON payloads with file attachments."""

from __future__ import annotations

import dataclasses
import json
import logging
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence

from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary, encode_multipart_formdata

from hookpost.core.errors import (
    AttachmentIOError,
    FinalizationError,
    PartCreationError,
    SerializationError,
)
from hookpost.core.models import File, MultipartBody

logger = logging.getLogger(__name__)

PAYLOAD_FIELD_NAME = "payload_json"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def escape_quotes(value: str) -> str:
    """Escape backslashes and double quotes for a quoted header parameter."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_payload(payload: Any) -> bytes:
    """Serialize a payload to compact UTF-8 JSON."""
    try:
        text = json.dumps(
            payload,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_json_default,
        )
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"failed to marshal payload: {exc}") from exc
    return text.encode("utf-8")


def _create_part(name: str, data: bytes, content_type: str, filename: Optional[str] = None) -> RequestField:
    """Build one part with explicit headers.

    ``RequestField`` does not fail for str headers; PartCreationError mirrors
    the writer's part-creation failure should that change.
    """
    disposition = f'form-data; name="{name}"'
    if filename is not None:
        disposition += f'; filename="{escape_quotes(filename)}"'
    headers = {"Content-Disposition": disposition, "Content-Type": content_type}
    try:
        return RequestField(name=name, data=data, headers=headers)
    except (TypeError, ValueError) as exc:
        raise PartCreationError(f"failed to create part {name}: {exc}") from exc


def _read_attachment(file: File, index: int) -> bytes:
    try:
        data = file.reader.read()
    except Exception as exc:
        raise AttachmentIOError(f"failed to copy file{index} ({file.name}): {exc}", file_index=index) from exc
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise AttachmentIOError(
            f"failed to copy file{index} ({file.name}): reader returned {type(data).__name__}, expected bytes",
            file_index=index,
        )
    return bytes(data)


def build_multipart_body(payload: Any, files: Sequence[File] = ()) -> MultipartBody:
    """Build a multipart/form-data body from a JSON payload and attachments.

    The payload is sent as the ``payload_json`` part. Each attachment becomes a
    ``file<index>`` part, where the index is its position in ``files``.

    Raises:
        SerializationError: The payload is not JSON serializable.
        PartCreationError: A part header block could not be created.
        AttachmentIOError: An attachment's reader failed.
        FinalizationError: The body could not be encoded and closed.
    """
    boundary = choose_boundary()
    parts: List[RequestField] = [
        _create_part(PAYLOAD_FIELD_NAME, serialize_payload(payload), "application/json"),
    ]

    for index, file in enumerate(files):
        content_type = file.content_type or DEFAULT_CONTENT_TYPE
        data = _read_attachment(file, index)
        parts.append(_create_part(f"file{index}", data, content_type, filename=file.name))

    try:
        body, content_type = encode_multipart_formdata(parts, boundary=boundary)
    except (TypeError, ValueError) as exc:
        raise FinalizationError(f"failed to close multipart body: {exc}") from exc

    logger.debug("Built multipart body with %d attachment(s), %d bytes", len(files), len(body))
    return MultipartBody(content_type=content_type, body=body)


@contextmanager
def open_attachments(
    paths: Sequence[str | Path], content_types: Optional[Sequence[str]] = None
) -> Iterator[List[File]]:
    """Open files for upload and close them when the block exits."""
    if content_types is not None and len(content_types) != len(paths):
        raise ValueError("content_types must match paths in length")
    with ExitStack() as stack:
        files: List[File] = []
        for index, path in enumerate(paths):
            file_path = Path(path)
            handle = stack.enter_context(file_path.open("rb"))
            content_type = content_types[index] if content_types is not None else ""
            files.append(File(name=file_path.name, reader=handle, content_type=content_type))
        yield files
