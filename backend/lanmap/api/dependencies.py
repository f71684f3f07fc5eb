"""Shared FastAPI dependencies.

Services are built once per application in the lifespan handler and kept on
``app.state``; these accessors hand them to route functions.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from lanmap.core.config import Settings, get_settings
from lanmap.db.store import NodeStore
from lanmap.ingest.pipeline import ImportPipeline
from lanmap.pack.service import ContextPackService


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_store(request: Request) -> NodeStore:
    return request.app.state.store


def get_import_pipeline(request: Request) -> ImportPipeline:
    return request.app.state.import_pipeline


def get_pack_service(request: Request) -> ContextPackService:
    return request.app.state.pack_service


__all__ = [
    "get_app_settings",
    "get_store",
    "get_import_pipeline",
    "get_pack_service",
]
