"""Internal dataclasses representing persisted entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Host:
    id: str
    label: str
    address: str
    created_at: int
    updated_at: int


@dataclass(slots=True)
class FileNode:
    id: str
    host_id: str
    path: str
    name: str
    type: str
    size: int | float | None
    mtime: str | None
    is_hidden: bool
    content_type: str
    content: str | None
    sha256: str | None

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


@dataclass(slots=True)
class ImportRun:
    id: str
    host_id: str
    version: str
    generated_at: str
    root_path: str
    run_path: str
    run_parent_path: str
    entry_count: int
    payload_size: int
    warnings: str | None
    created_at: int


@dataclass(slots=True)
class HostSummary:
    """Host row joined with its node count and latest import run."""

    host: Host
    file_count: int
    latest_run: ImportRun | None


__all__ = ["Host", "FileNode", "ImportRun", "HostSummary"]
