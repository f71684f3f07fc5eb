"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImportRequest(CamelModel):
    payload: str | None = Field(default=None, description="LANMAP1 payload string")


class ImportResponse(CamelModel):
    host_id: str
    imported_count: int
    skipped_count: int
    warnings: list[str]


class HostCreateRequest(CamelModel):
    label: str | None = None
    address: str | None = None


class HostResponse(CamelModel):
    id: str
    label: str
    address: str
    updated_at: str
    file_count: int
    root_path: str | None = None
    run_path: str | None = None
    run_parent_path: str | None = None
    imported_at: str | None = None


class HostListResponse(CamelModel):
    hosts: list[HostResponse]


class HostCreateResponse(CamelModel):
    host: HostResponse


class TreeResponse(CamelModel):
    tree: list[dict[str, Any]]


class FileContent(CamelModel):
    id: str
    path: str
    name: str
    size: int | float | None
    mtime: str | None
    content_type: str
    content: str | None
    sha256: str | None


class FileContentResponse(CamelModel):
    file: FileContent


class ContextPackRequest(CamelModel):
    host_id: str | None = None
    snippet_mode: str | None = None
    chunk_preset: str | None = None


class PartStatsModel(CamelModel):
    files: int
    snippet_count: int
    chars: int


class ContextPackPartModel(CamelModel):
    index: int
    total: int
    content: str
    stats: PartStatsModel


class ContextPackSummary(CamelModel):
    host_id: str
    generated_at: str
    truncated_file_count: int


class ContextPackResponse(CamelModel):
    parts: list[ContextPackPartModel]
    summary: ContextPackSummary


__all__ = [
    "ImportRequest",
    "ImportResponse",
    "HostCreateRequest",
    "HostResponse",
    "HostListResponse",
    "HostCreateResponse",
    "TreeResponse",
    "FileContent",
    "FileContentResponse",
    "ContextPackRequest",
    "ContextPackPartModel",
    "ContextPackSummary",
    "ContextPackResponse",
]
