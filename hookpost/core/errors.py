"""Exception types raised while preparing and sending API requests."""

from __future__ import annotations


class HookpostError(RuntimeError):
    """Base class for all hookpost failures."""


class RequestBodyError(HookpostError):
    """Raised when a request body cannot be produced."""


class UnsupportedImageTypeError(RequestBodyError, ValueError):
    """Raised when bytes do not start with a known image signature."""

    def __init__(self, message: str = "unsupported image type") -> None:
        super().__init__(message)


class SerializationError(RequestBodyError):
    """Raised when the JSON payload cannot be serialized."""


class PartCreationError(RequestBodyError):
    """Raised when a multipart part cannot be created."""


class AttachmentIOError(RequestBodyError, OSError):
    """Raised when an attachment's byte source cannot be read."""

    def __init__(self, message: str, file_index: int | None = None) -> None:
        super().__init__(message)
        self.file_index = file_index


class FinalizationError(RequestBodyError):
    """Raised when the multipart body cannot be closed out."""


class ApiError(HookpostError):
    """Represents an HTTP error response from the API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
