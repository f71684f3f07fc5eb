"""Host, tree and file routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lanmap.api.dependencies import get_store
from lanmap.core.errors import RequestError
from lanmap.db.store import NodeStore
from lanmap.models.dto import (
    FileContent,
    FileContentResponse,
    HostCreateRequest,
    HostCreateResponse,
    HostListResponse,
    HostResponse,
    TreeResponse,
)
from lanmap.models.entities import HostSummary
from lanmap.tree.builder import build_tree
from lanmap.utils.time import ms_to_iso

router = APIRouter()


@router.get("/hosts", response_model=HostListResponse, summary="List imported hosts")
async def list_hosts(store: NodeStore = Depends(get_store)) -> HostListResponse:
    return HostListResponse(hosts=[_summary_to_response(summary) for summary in store.list_hosts()])


@router.post("/hosts", response_model=HostCreateResponse, status_code=201, summary="Register a host")
async def create_host(
    request: HostCreateRequest,
    store: NodeStore = Depends(get_store),
) -> HostCreateResponse:
    label = (request.label or "").strip()
    address = (request.address or "").strip()
    if not label or not address:
        raise RequestError.invalid("label" if not label else "address", "label and address are required")
    host = store.create_host(label, address)
    return HostCreateResponse(
        host=HostResponse(
            id=host.id,
            label=host.label,
            address=host.address,
            updated_at=ms_to_iso(host.updated_at),
            file_count=0,
        )
    )


@router.get("/hosts/{host_id}/tree", response_model=TreeResponse, summary="Hierarchical file tree")
async def host_tree(host_id: str, store: NodeStore = Depends(get_store)) -> TreeResponse:
    if store.get_host(host_id) is None:
        raise RequestError.not_found("Host")
    roots = build_tree(store.list_nodes(host_id))
    return TreeResponse(tree=[node.to_dict() for node in roots])


@router.get("/files/{node_id}/content", response_model=FileContentResponse, summary="Stored file content")
async def file_content(node_id: str, store: NodeStore = Depends(get_store)) -> FileContentResponse:
    node = store.get_node(node_id)
    if node is None:
        raise RequestError.not_found("File")
    if node.is_dir:
        raise RequestError.invalid("id", "Entry is a directory")
    return FileContentResponse(
        file=FileContent(
            id=node.id,
            path=node.path,
            name=node.name,
            size=node.size,
            mtime=node.mtime,
            content_type=node.content_type,
            content=node.content,
            sha256=node.sha256,
        )
    )


def _summary_to_response(summary: HostSummary) -> HostResponse:
    run = summary.latest_run
    return HostResponse(
        id=summary.host.id,
        label=summary.host.label,
        address=summary.host.address,
        updated_at=ms_to_iso(summary.host.updated_at),
        file_count=summary.file_count,
        root_path=run.root_path if run else None,
        run_path=run.run_path if run else None,
        run_parent_path=run.run_parent_path if run else None,
        imported_at=ms_to_iso(run.created_at) if run else None,
    )


__all__ = ["router"]
