"""Tests for payload decoding and validation."""

from __future__ import annotations

import base64
import gzip
import zlib

import orjson
import pytest

from lanmap.core.errors import PathError, PayloadError, PayloadErrorKind
from lanmap.ingest.payload import decode_payload


def _raw(document: object, compression: str = "gzip-base64", packer=gzip.compress) -> str:
    body = base64.b64encode(packer(orjson.dumps(document))).decode("ascii")
    return f"LANMAP1:{compression}:{body}"


def _kind(excinfo: pytest.ExceptionInfo) -> PayloadErrorKind:
    return excinfo.value.kind


def test_decode_gzip_payload_defaults(make_payload, sample_entries) -> None:
    decoded = decode_payload(make_payload(sample_entries))
    assert decoded.compression == "gzip-base64"
    assert decoded.raw_byte_size > 0
    data = decoded.data
    assert data.host.label == "Lab Box"
    assert data.generated_at == "2024-05-01T12:00:00.000Z"
    by_path = {entry.path: entry for entry in data.entries}
    assert by_path["etc"].content_type == "none"
    assert by_path["etc"].content is None
    assert by_path[".ssh/id_rsa"].is_hidden is True
    assert by_path["readme.md"].is_hidden is False


def _raw_deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def test_decode_deflate_payload_zlib_and_raw(make_payload) -> None:
    entries = [{"path": "a.txt", "name": "a.txt", "type": "file"}]
    wrapped = decode_payload(make_payload(entries, compression="deflate-base64"))
    assert wrapped.compression == "deflate-base64"
    assert wrapped.data.entries[0].content_type == "binary"

    document = {
        "version": "1",
        "generatedAt": "2024-05-01T12:00:00Z",
        "rootPath": "/srv",
        "host": {"label": "raw", "address": "10.0.0.9"},
        "entries": entries,
    }
    decoded = decode_payload(_raw(document, "deflate-base64", packer=_raw_deflate))
    assert decoded.data.entries[0].path == "a.txt"
    assert decoded.data.run_path is None


def test_rejects_bad_prefix_and_format() -> None:
    with pytest.raises(PayloadError) as excinfo:
        decode_payload("LANMAP2:gzip-base64:abcd")
    assert _kind(excinfo) is PayloadErrorKind.BAD_PREFIX

    with pytest.raises(PayloadError) as excinfo:
        decode_payload("LANMAP1:gzip-base64")
    assert _kind(excinfo) is PayloadErrorKind.BAD_FORMAT


def test_rejects_unknown_compression() -> None:
    with pytest.raises(PayloadError) as excinfo:
        decode_payload("LANMAP1:brotli-base64:abcd")
    assert _kind(excinfo) is PayloadErrorKind.UNSUPPORTED_COMPRESSION


def test_corrupt_stream_is_decode_failure() -> None:
    payload = "LANMAP1:gzip-base64:" + base64.b64encode(b"definitely not gzip").decode("ascii")
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(payload)
    assert _kind(excinfo) is PayloadErrorKind.DECODE_FAILURE
    assert excinfo.value.__cause__ is not None


def test_truncated_stream_is_decode_failure() -> None:
    packed = gzip.compress(b'{"version": "1"}' * 50)
    payload = "LANMAP1:gzip-base64:" + base64.b64encode(packed[: len(packed) // 2]).decode("ascii")
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(payload)
    assert _kind(excinfo) is PayloadErrorKind.DECODE_FAILURE


def test_decompression_is_bounded() -> None:
    bomb = "LANMAP1:gzip-base64:" + base64.b64encode(gzip.compress(b" " * 1_000_000)).decode("ascii")
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(bomb, max_decompressed_bytes=10_000)
    assert _kind(excinfo) is PayloadErrorKind.TOO_LARGE


def test_payload_length_is_bounded(make_payload, sample_entries) -> None:
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(make_payload(sample_entries), max_payload_chars=20)
    assert _kind(excinfo) is PayloadErrorKind.TOO_LARGE


def test_invalid_json() -> None:
    payload = "LANMAP1:gzip-base64:" + base64.b64encode(gzip.compress(b"{not json")).decode("ascii")
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(payload)
    assert _kind(excinfo) is PayloadErrorKind.INVALID_JSON


@pytest.mark.parametrize(
    ("override", "field"),
    [
        ({"version": 1}, "version"),
        ({"generatedAt": "yesterday"}, "generatedAt"),
        ({"generatedAt": "0001-01-01T00:00:00+01:00"}, "generatedAt"),
        ({"rootPath": ""}, "rootPath"),
        ({"host": {"label": "  ", "address": "10.0.0.1"}}, "host.label"),
        ({"host": {"label": "box"}}, "host.address"),
        ({"entries": {}}, "entries"),
    ],
)
def test_schema_violations(make_payload, override: dict, field: str) -> None:
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(make_payload([], **override))
    assert _kind(excinfo) is PayloadErrorKind.SCHEMA_VIOLATION
    assert excinfo.value.field == field


@pytest.mark.parametrize(
    ("entry", "field"),
    [
        ({"path": "a", "name": "a", "type": "link"}, "entries[0].type"),
        ({"path": "a", "name": "", "type": "file"}, "entries[0].name"),
        ({"path": "a", "name": "a", "type": "file", "contentType": "video"}, "entries[0].contentType"),
        ({"path": "a", "name": "a", "type": "dir", "contentType": "text"}, "entries[0].contentType"),
        ({"path": "a", "name": "a", "type": "file", "size": -1}, "entries[0].size"),
        ({"path": "a", "name": "a", "type": "file", "size": "12"}, "entries[0].size"),
        ({"path": "a", "name": "a", "type": "file", "mtime": "not a date"}, "entries[0].mtime"),
        ({"path": "a", "name": "a", "type": "file", "mtime": "0001-01-01T00:00:00+01:00"}, "entries[0].mtime"),
        ({"path": "a", "name": "a", "type": "file", "mtime": "9999-12-31T23:59:59-01:00"}, "entries[0].mtime"),
        ({"path": "a", "name": "a", "type": "file", "size": 2**63}, "entries[0].size"),
        ({"path": "a", "name": "a", "type": "file", "size": 1e300}, "entries[0].size"),
        ({"path": "d/" * 64 + "leaf", "name": "leaf", "type": "file"}, "entries[0].path"),
        ({"path": "a", "name": "a", "type": "file", "isHidden": "yes"}, "entries[0].isHidden"),
    ],
)
def test_entry_schema_violations(make_payload, entry: dict, field: str) -> None:
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(make_payload([entry]))
    assert _kind(excinfo) is PayloadErrorKind.SCHEMA_VIOLATION
    assert excinfo.value.field == field


def test_directory_with_content_is_rejected(make_payload) -> None:
    entries = [{"path": "d", "name": "d", "type": "dir", "content": "nope"}]
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(make_payload(entries))
    assert _kind(excinfo) is PayloadErrorKind.DIRECTORY_HAS_CONTENT
    assert excinfo.value.path == "d"


def test_unsafe_entry_path_aborts_decode(make_payload) -> None:
    entries = [{"path": "../../etc/shadow", "name": "shadow", "type": "file"}]
    with pytest.raises(PathError):
        decode_payload(make_payload(entries))


def test_duplicate_normalized_paths_are_rejected(make_payload) -> None:
    entries = [
        {"path": "docs/notes.txt", "name": "notes.txt", "type": "file"},
        {"path": "./docs//notes.txt", "name": "notes.txt", "type": "file"},
    ]
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(make_payload(entries))
    assert _kind(excinfo) is PayloadErrorKind.DUPLICATE_PATH
    assert excinfo.value.path == "docs/notes.txt"


def test_size_and_mtime_are_normalized(make_payload) -> None:
    entries = [
        {"path": "a.bin", "name": "a.bin", "type": "file", "size": 10.0, "mtime": "2024-01-02T03:04:05+02:00"},
    ]
    entry = decode_payload(make_payload(entries)).data.entries[0]
    assert entry.size == 10
    assert isinstance(entry.size, int)
    assert entry.mtime == "2024-01-02T01:04:05.000Z"


def test_path_depth_limit_is_configurable(make_payload) -> None:
    entries = [{"path": "a/b/c/d.txt", "name": "d.txt", "type": "file"}]
    assert decode_payload(make_payload(entries), max_path_depth=4).data.entries[0].path == "a/b/c/d.txt"
    with pytest.raises(PayloadError) as excinfo:
        decode_payload(make_payload(entries), max_path_depth=3)
    assert _kind(excinfo) is PayloadErrorKind.SCHEMA_VIOLATION
    assert excinfo.value.path == "a/b/c/d.txt"
