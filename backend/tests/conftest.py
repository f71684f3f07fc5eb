"""Test fixtures for LanMap."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from lanmap.ingest.payload import encode_payload  # noqa: E402


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the database at a temp file and drop cached settings between tests."""
    monkeypatch.setenv("LANMAP_DB_PATH", str(tmp_path / "lanmap.db"))
    monkeypatch.delenv("LANMAP_CONFIG", raising=False)

    from lanmap.api import dependencies as deps
    from lanmap.core import config

    deps.get_app_settings.cache_clear()
    config.get_settings.cache_clear()
    yield
    deps.get_app_settings.cache_clear()
    config.get_settings.cache_clear()


@pytest.fixture
def make_payload() -> Callable[..., str]:
    """Build a LANMAP1 payload string for a host and entry list."""

    def factory(
        entries: list[dict[str, Any]],
        /,
        label: str = "Lab Box",
        address: str = "10.0.0.5",
        compression: str = "gzip-base64",
        **overrides: Any,
    ) -> str:
        data: dict[str, Any] = {
            "version": "1",
            "generatedAt": "2024-05-01T12:00:00.000Z",
            "rootPath": "/home/user",
            "runPath": "/home/user/projects/sample",
            "runParentPath": "/home/user/projects",
            "host": {"label": label, "address": address},
            "entries": entries,
        }
        data.update(overrides)
        return encode_payload(data, compression)  # type: ignore[arg-type]

    return factory


@pytest.fixture
def sample_entries() -> list[dict[str, Any]]:
    return [
        {"path": "etc", "name": "etc", "type": "dir"},
        {"path": "etc/hosts", "name": "hosts", "type": "file", "contentType": "text", "content": "127.0.0.1 localhost"},
        {"path": "secret.key", "name": "secret.key", "type": "file", "contentType": "text", "content": "abc"},
        {"path": "readme.md", "name": "readme.md", "type": "file", "contentType": "text", "content": "def"},
        {"path": ".ssh/id_rsa", "name": "id_rsa", "type": "file", "contentType": "binary", "size": 2048},
    ]
