"""Decoding and validation of LANMAP1 scan payloads.

A payload is an ASCII string ``LANMAP1:<compression>:<base64>`` whose decoded
body is a UTF-8 JSON document describing one host and a flat list of file and
directory entries.  Everything in it is untrusted: decoding fails fast on the
first problem and never returns a partially valid payload.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import math
import zlib
from typing import Any, Mapping

import orjson

from lanmap.core.errors import PayloadError, PayloadErrorKind
from lanmap.ingest.paths import is_hidden_path, normalize_import_path
from lanmap.ingest.types import (
    Compression,
    DecodedPayload,
    HostInfo,
    PayloadData,
    ValidatedEntry,
)
from lanmap.utils.time import isoformat, parse_timestamp

PAYLOAD_PREFIX = "LANMAP1:"
PAYLOAD_VERSION = "1"
SUPPORTED_COMPRESSIONS: tuple[str, ...] = ("gzip-base64", "deflate-base64")
ENTRY_TYPES = ("file", "dir")
CONTENT_TYPES = ("text", "binary", "none")

DEFAULT_MAX_PAYLOAD_CHARS = 64 * 1024 * 1024
DEFAULT_MAX_DECOMPRESSED_BYTES = 256 * 1024 * 1024
DEFAULT_MAX_PATH_DEPTH = 64
# Largest value an SQLite INTEGER column can bind.
MAX_ENTRY_SIZE = 2**63 - 1


def decode_payload(
    payload: str,
    *,
    max_payload_chars: int = DEFAULT_MAX_PAYLOAD_CHARS,
    max_decompressed_bytes: int = DEFAULT_MAX_DECOMPRESSED_BYTES,
    max_path_depth: int = DEFAULT_MAX_PATH_DEPTH,
) -> DecodedPayload:
    """Decode, decompress and validate a payload string."""
    if not isinstance(payload, str) or not payload.strip():
        raise PayloadError.schema("payload", "payload is required")

    trimmed = payload.strip()
    if len(trimmed) > max_payload_chars:
        raise PayloadError(
            PayloadErrorKind.TOO_LARGE,
            f"Payload exceeds {max_payload_chars} characters",
        )
    if not trimmed.startswith(PAYLOAD_PREFIX):
        raise PayloadError(PayloadErrorKind.BAD_PREFIX, "Payload prefix must be LANMAP1:")

    segments = trimmed.split(":")
    if len(segments) < 3:
        raise PayloadError(
            PayloadErrorKind.BAD_FORMAT,
            "Payload format must be LANMAP1:<compression>:<base64>",
        )
    compression = segments[1]
    body = ":".join(segments[2:])
    if compression not in SUPPORTED_COMPRESSIONS:
        raise PayloadError(
            PayloadErrorKind.UNSUPPORTED_COMPRESSION,
            f"Unsupported compression method: {compression}",
            field="compression",
        )

    decoded = _inflate(compression, _b64decode(body), max_decompressed_bytes)

    try:
        document = orjson.loads(decoded)
    except orjson.JSONDecodeError as exc:
        raise PayloadError(
            PayloadErrorKind.INVALID_JSON,
            "Decoded payload is not valid JSON",
            detail=str(exc),
        ) from exc

    return DecodedPayload(
        compression=compression,  # type: ignore[arg-type]
        raw_byte_size=len(decoded),
        data=_validate_document(document, max_path_depth),
    )


def encode_payload(data: Mapping[str, Any], compression: Compression = "gzip-base64") -> str:
    """Build a payload string from a JSON-serializable mapping."""
    raw = orjson.dumps(data)
    if compression == "gzip-base64":
        packed = gzip.compress(raw)
    elif compression == "deflate-base64":
        packed = zlib.compress(raw)
    else:
        raise ValueError(f"Unsupported compression method: {compression}")
    return f"{PAYLOAD_PREFIX}{compression}:{base64.b64encode(packed).decode('ascii')}"


# Decoding -------------------------------------------------------------


def _b64decode(body: str) -> bytes:
    compact = "".join(body.split())
    compact += "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(compact)
    except (binascii.Error, ValueError) as exc:
        raise _decode_failure(exc) from exc


def _inflate(compression: str, raw: bytes, limit: int) -> bytes:
    """Inflate ``raw`` without ever producing more than ``limit`` bytes."""
    if compression == "gzip-base64":
        wbits = 16 + zlib.MAX_WBITS
    elif _has_zlib_header(raw):
        wbits = zlib.MAX_WBITS
    else:
        wbits = -zlib.MAX_WBITS

    output = bytearray()
    remaining = raw
    while True:
        inflater = zlib.decompressobj(wbits)
        try:
            output += inflater.decompress(remaining, limit - len(output) + 1)
        except zlib.error as exc:
            raise _decode_failure(exc) from exc
        if len(output) > limit:
            raise PayloadError(
                PayloadErrorKind.TOO_LARGE,
                f"Decompressed payload exceeds {limit} bytes",
            )
        if not inflater.eof:
            raise _decode_failure(ValueError("compressed stream is truncated"))
        remaining = inflater.unused_data
        if not remaining:
            return bytes(output)
        if compression != "gzip-base64":
            raise _decode_failure(ValueError("unexpected data after compressed stream"))


def _has_zlib_header(raw: bytes) -> bool:
    if len(raw) < 2:
        return False
    cmf, flg = raw[0], raw[1]
    return cmf & 0x0F == 8 and (cmf << 8 | flg) % 31 == 0


def _decode_failure(exc: Exception) -> PayloadError:
    return PayloadError(
        PayloadErrorKind.DECODE_FAILURE,
        f"Could not decode payload: {exc}",
        detail=str(exc),
    )


# Validation -----------------------------------------------------------


def _validate_document(value: Any, max_path_depth: int) -> PayloadData:
    if not isinstance(value, dict):
        raise PayloadError.schema("payload", "payload is not an object")
    if value.get("version") != PAYLOAD_VERSION:
        raise PayloadError.schema("version", "payload version must be '1'")

    generated_at = _require_timestamp(value.get("generatedAt"), "generatedAt")
    root_path = _require_string(value.get("rootPath"), "rootPath")
    run_path = _optional_string(value.get("runPath"), "runPath")
    run_parent_path = _optional_string(value.get("runParentPath"), "runParentPath")

    host = value.get("host")
    if not isinstance(host, dict):
        raise PayloadError.schema("host", "missing host metadata")
    host_info = HostInfo(
        label=_require_string(host.get("label"), "host.label").strip(),
        address=_require_string(host.get("address"), "host.address").strip(),
    )

    raw_entries = value.get("entries")
    if not isinstance(raw_entries, list):
        raise PayloadError.schema("entries", "entries must be an array")

    seen: set[str] = set()
    entries: list[ValidatedEntry] = []
    for index, raw in enumerate(raw_entries):
        entry = _validate_entry(raw, index, max_path_depth)
        if entry.path in seen:
            raise PayloadError(
                PayloadErrorKind.DUPLICATE_PATH,
                f"Duplicate path in payload: {entry.path}",
                field=f"entries[{index}].path",
                path=entry.path,
            )
        seen.add(entry.path)
        entries.append(entry)

    return PayloadData(
        version=PAYLOAD_VERSION,
        generated_at=generated_at,
        root_path=root_path,
        host=host_info,
        entries=entries,
        run_path=run_path,
        run_parent_path=run_parent_path,
    )


def _validate_entry(raw: Any, index: int, max_path_depth: int) -> ValidatedEntry:
    prefix = f"entries[{index}]"
    if not isinstance(raw, dict):
        raise PayloadError.schema(prefix, "entry is not an object")

    entry_type = raw.get("type")
    if entry_type not in ENTRY_TYPES:
        raise PayloadError.schema(f"{prefix}.type", "type must be 'file' or 'dir'")

    path = normalize_import_path(_require_string(raw.get("path"), f"{prefix}.path"))
    if path.count("/") >= max_path_depth:
        raise PayloadError.schema(f"{prefix}.path", f"path is deeper than {max_path_depth} segments", path)
    name = _require_string(raw.get("name"), f"{prefix}.name", path)

    content = raw.get("content")
    if content is not None and not isinstance(content, str):
        raise PayloadError.schema(f"{prefix}.content", "content must be a string", path)
    if entry_type == "dir" and content:
        raise PayloadError(
            PayloadErrorKind.DIRECTORY_HAS_CONTENT,
            f"Directory entry cannot contain content: {path}",
            field=f"{prefix}.content",
            path=path,
        )

    content_type = raw.get("contentType")
    if content_type is not None:
        if content_type not in CONTENT_TYPES:
            raise PayloadError.schema(f"{prefix}.contentType", "must be text, binary or none", path)
        if entry_type == "dir" and content_type != "none":
            raise PayloadError.schema(f"{prefix}.contentType", "directory contentType must be none", path)
    else:
        content_type = "none" if entry_type == "dir" else "binary"

    is_hidden = raw.get("isHidden")
    if is_hidden is None:
        is_hidden = is_hidden_path(path)
    elif not isinstance(is_hidden, bool):
        raise PayloadError.schema(f"{prefix}.isHidden", "must be a boolean", path)

    mtime = raw.get("mtime")
    if mtime is not None:
        mtime = _require_timestamp(mtime, f"{prefix}.mtime", path)

    return ValidatedEntry(
        path=path,
        name=name,
        type=entry_type,
        size=_validate_size(raw.get("size"), f"{prefix}.size", path),
        mtime=mtime,
        is_hidden=is_hidden,
        content_type=content_type,
        content=None if entry_type == "dir" else content,
        sha256=_optional_string(raw.get("sha256"), f"{prefix}.sha256", path),
    )


def _validate_size(value: Any, field: str, path: str) -> int | float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError.schema(field, "size must be a number", path)
    if not math.isfinite(value) or value < 0:
        raise PayloadError.schema(field, "size must be a non-negative finite number", path)
    if value > MAX_ENTRY_SIZE:
        raise PayloadError.schema(field, "size out of range", path)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _require_string(value: Any, field: str, path: str | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PayloadError.schema(field, "expected a non-empty string", path)
    return value


def _optional_string(value: Any, field: str, path: str | None = None) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise PayloadError.schema(field, "expected a string", path)
    return value


def _require_timestamp(value: Any, field: str, path: str | None = None) -> str:
    text = _require_string(value, field, path)
    try:
        return isoformat(parse_timestamp(text))
    except (ValueError, OverflowError) as exc:
        raise PayloadError.schema(field, "not a valid timestamp", path) from exc


__all__ = [
    "PAYLOAD_PREFIX",
    "SUPPORTED_COMPRESSIONS",
    "decode_payload",
    "encode_payload",
]
