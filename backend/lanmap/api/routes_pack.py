"""Context pack API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lanmap.api.dependencies import get_pack_service
from lanmap.models.dto import (
    ContextPackPartModel,
    ContextPackRequest,
    ContextPackResponse,
    ContextPackSummary,
    PartStatsModel,
)
from lanmap.pack.service import ContextPackService

router = APIRouter()


@router.post("", response_model=ContextPackResponse, summary="Generate a context pack for a host")
async def generate_context_pack(
    request: ContextPackRequest,
    service: ContextPackService = Depends(get_pack_service),
) -> ContextPackResponse:
    pack = service.generate(
        host_id=request.host_id,
        snippet_mode=request.snippet_mode,
        chunk_preset=request.chunk_preset,
    )
    return ContextPackResponse(
        parts=[
            ContextPackPartModel(
                index=part.index,
                total=part.total,
                content=part.content,
                stats=PartStatsModel(
                    files=part.stats.files,
                    snippet_count=part.stats.snippet_count,
                    chars=part.stats.chars,
                ),
            )
            for part in pack.parts
        ],
        summary=ContextPackSummary(
            host_id=pack.host_id,
            generated_at=pack.generated_at,
            truncated_file_count=pack.truncated_file_count,
        ),
    )
