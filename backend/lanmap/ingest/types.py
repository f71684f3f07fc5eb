"""Common import data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

EntryType = Literal["file", "dir"]
ContentType = Literal["text", "binary", "none"]
Compression = Literal["gzip-base64", "deflate-base64"]


@dataclass(slots=True)
class ValidatedEntry:
    """Payload entry after path normalization and defaulting."""

    path: str
    name: str
    type: EntryType
    size: int | float | None
    mtime: str | None
    is_hidden: bool
    content_type: ContentType
    content: str | None
    sha256: str | None


@dataclass(slots=True)
class HostInfo:
    label: str
    address: str


@dataclass(slots=True)
class PayloadData:
    """Validated body of a scan payload."""

    version: str
    generated_at: str
    root_path: str
    host: HostInfo
    entries: list[ValidatedEntry]
    run_path: str | None = None
    run_parent_path: str | None = None


@dataclass(slots=True)
class DecodedPayload:
    compression: Compression
    raw_byte_size: int
    data: PayloadData


@dataclass(slots=True)
class ImportResult:
    """Outcome of one full-replace import."""

    host_id: str
    imported_count: int
    skipped_count: int = 0
    warnings: list[str] = field(default_factory=list)


__all__ = [
    "EntryType",
    "ContentType",
    "Compression",
    "ValidatedEntry",
    "HostInfo",
    "PayloadData",
    "DecodedPayload",
    "ImportResult",
]
