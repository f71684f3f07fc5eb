"""Error taxonomy shared by the import, tree and context pack flows."""

from __future__ import annotations

from enum import Enum
from typing import Any


class PathErrorKind(str, Enum):
    EMPTY = "empty_path"
    ABSOLUTE = "absolute_path"
    UNSAFE_SEGMENT = "unsafe_segment"


class PayloadErrorKind(str, Enum):
    BAD_PREFIX = "bad_prefix"
    BAD_FORMAT = "bad_format"
    UNSUPPORTED_COMPRESSION = "unsupported_compression"
    DECODE_FAILURE = "decode_failure"
    INVALID_JSON = "invalid_json"
    SCHEMA_VIOLATION = "schema_violation"
    DUPLICATE_PATH = "duplicate_path"
    DIRECTORY_HAS_CONTENT = "directory_has_content"
    TOO_LARGE = "too_large"


class RequestErrorKind(str, Enum):
    INVALID_PARAMETER = "invalid_parameter"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class LanMapError(Exception):
    """Base class for errors that carry a machine-readable kind."""

    status_code: int = 400

    def __init__(self, message: str, kind: Enum) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind

    def context(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "kind": self.kind.value}
        payload.update({key: value for key, value in self.context().items() if value is not None})
        return payload


class PathError(LanMapError):
    """Raised when an import path cannot be normalized safely."""

    def __init__(self, kind: PathErrorKind, path: str, message: str) -> None:
        super().__init__(message, kind)
        self.path = path

    def context(self) -> dict[str, Any]:
        return {"path": self.path}


class PayloadError(LanMapError):
    """Raised when a scan payload is rejected."""

    def __init__(
        self,
        kind: PayloadErrorKind,
        message: str,
        *,
        field: str | None = None,
        path: str | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message, kind)
        self.field = field
        self.path = path
        self.detail = detail

    @classmethod
    def schema(cls, field: str, reason: str, path: str | None = None) -> "PayloadError":
        message = f"Invalid {field}: {reason}"
        if path:
            message = f"{message} ({path})"
        return cls(PayloadErrorKind.SCHEMA_VIOLATION, message, field=field, path=path)

    def context(self) -> dict[str, Any]:
        return {"field": self.field, "path": self.path, "detail": self.detail}


_REQUEST_STATUS = {
    RequestErrorKind.INVALID_PARAMETER: 400,
    RequestErrorKind.NOT_FOUND: 404,
    RequestErrorKind.CONFLICT: 409,
}


class RequestError(LanMapError):
    """Raised for bad request parameters or unknown resources."""

    def __init__(self, kind: RequestErrorKind, message: str, *, field: str | None = None) -> None:
        super().__init__(message, kind)
        self.field = field
        self.status_code = _REQUEST_STATUS[kind]

    @classmethod
    def not_found(cls, what: str) -> "RequestError":
        return cls(RequestErrorKind.NOT_FOUND, f"{what} not found")

    @classmethod
    def invalid(cls, field: str, message: str) -> "RequestError":
        return cls(RequestErrorKind.INVALID_PARAMETER, message, field=field)

    def context(self) -> dict[str, Any]:
        return {"field": self.field}


__all__ = [
    "LanMapError",
    "PathError",
    "PathErrorKind",
    "PayloadError",
    "PayloadErrorKind",
    "RequestError",
    "RequestErrorKind",
]
