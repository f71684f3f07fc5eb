"""Normalization and safety checks for paths reported by scanners."""

from __future__ import annotations

import re

from lanmap.core.errors import PathError, PathErrorKind

_REPEATED_SLASH_RE = re.compile(r"/+")
_UNSAFE_SEGMENTS = frozenset({"", ".", ".."})


def normalize_import_path(value: str) -> str:
    """Return a relative, slash-separated path or raise PathError."""
    normalized = value.replace("\\", "/")
    if normalized.startswith("./"):
        normalized = normalized[2:]
    normalized = _REPEATED_SLASH_RE.sub("/", normalized).strip()

    if not normalized:
        raise PathError(PathErrorKind.EMPTY, value, "Empty path is not allowed")
    if normalized.startswith("/"):
        raise PathError(PathErrorKind.ABSOLUTE, value, f"Absolute path is not allowed: {value}")
    if any(segment in _UNSAFE_SEGMENTS for segment in normalized.split("/")):
        raise PathError(PathErrorKind.UNSAFE_SEGMENT, value, f"Unsafe path detected: {value}")
    return normalized


def is_hidden_path(path: str) -> bool:
    return any(segment.startswith(".") for segment in path.split("/"))


def parent_path(path: str) -> str | None:
    """Path without its last segment; None for root-level entries."""
    head, sep, _ = path.rpartition("/")
    return head if sep else None


def base_name(path: str) -> str:
    return path.rpartition("/")[2]


__all__ = ["normalize_import_path", "is_hidden_path", "parent_path", "base_name"]
