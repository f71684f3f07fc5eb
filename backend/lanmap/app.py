"""FastAPI application setup for LanMap."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lanmap.api.dependencies import get_app_settings
from lanmap.api.routes_admin import router as admin_router
from lanmap.api.routes_hosts import router as hosts_router
from lanmap.api.routes_import import router as import_router
from lanmap.api.routes_pack import router as pack_router
from lanmap.core.config import Settings
from lanmap.core.errors import LanMapError
from lanmap.core.logging import configure_logging, get_logger
from lanmap.db.sqlite import SQLiteDatabase
from lanmap.db.store import NodeStore
from lanmap.ingest.pipeline import ImportPipeline
from lanmap.pack.service import ContextPackService

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; the store opens on startup and closes on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        resolved = settings or get_app_settings()
        configure_logging(resolved.log_level, use_json=resolved.log_json)
        db = SQLiteDatabase(resolved.db_path)
        db.ensure_schema()
        store = NodeStore(db, batch_size=resolved.insert_batch_size)
        app.state.settings = resolved
        app.state.store = store
        app.state.import_pipeline = ImportPipeline(store, resolved)
        app.state.pack_service = ContextPackService(store)
        logger.info("Database ready at %s", resolved.db_path)
        try:
            yield
        finally:
            db.close()

    app = FastAPI(
        title="LanMap",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=(settings or get_app_settings()).cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(import_router, prefix="/import", tags=["import"])
    app.include_router(pack_router, prefix="/context-pack", tags=["context-pack"])
    app.include_router(hosts_router, prefix="", tags=["hosts"])
    app.include_router(admin_router, prefix="", tags=["admin"])

    @app.exception_handler(LanMapError)
    async def handle_lanmap_error(request: Request, exc: LanMapError) -> JSONResponse:
        logger.info(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            extra={"ctx_kind": exc.kind.value, "ctx_status": exc.status_code},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    return app


app = create_app()
