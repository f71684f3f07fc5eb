"""Import API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lanmap.api.dependencies import get_import_pipeline
from lanmap.core.errors import RequestError
from lanmap.ingest.pipeline import ImportPipeline
from lanmap.models.dto import ImportRequest, ImportResponse

router = APIRouter()


@router.post("", response_model=ImportResponse, summary="Import a scan payload")
async def import_payload(
    request: ImportRequest,
    pipeline: ImportPipeline = Depends(get_import_pipeline),
) -> ImportResponse:
    if not request.payload:
        raise RequestError.invalid("payload", "payload is required")
    result = pipeline.import_payload(request.payload)
    return ImportResponse(
        host_id=result.host_id,
        imported_count=result.imported_count,
        skipped_count=result.skipped_count,
        warnings=result.warnings,
    )
