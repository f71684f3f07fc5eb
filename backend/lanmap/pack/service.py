"""Context pack generation over stored host nodes."""

from __future__ import annotations

import time
from dataclasses import dataclass

from lanmap.core.errors import RequestError
from lanmap.core.logging import get_logger
from lanmap.core.metrics import PACK_DURATION, PACK_PARTS
from lanmap.db.store import NodeStore
from lanmap.pack.assembler import ContextPackPart, assemble_parts, build_pack_blocks
from lanmap.pack.chunker import CHUNK_PRESET_LIMITS, chunk_blocks
from lanmap.utils.time import isoformat, utc_now

logger = get_logger(__name__)

SNIPPET_MODES = ("compact", "full")
DEFAULT_SNIPPET_MODE = "compact"
DEFAULT_CHUNK_PRESET = "medium"


@dataclass(slots=True)
class ContextPack:
    host_id: str
    generated_at: str
    truncated_file_count: int
    parts: list[ContextPackPart]


class ContextPackService:
    """Build size-bounded text packs describing one host's file tree."""

    def __init__(self, store: NodeStore) -> None:
        self.store = store

    def generate(
        self,
        host_id: str | None,
        snippet_mode: str | None = None,
        chunk_preset: str | None = None,
    ) -> ContextPack:
        if not isinstance(host_id, str) or not host_id.strip():
            raise RequestError.invalid("hostId", "hostId is required")
        mode = DEFAULT_SNIPPET_MODE if snippet_mode is None else snippet_mode
        preset = DEFAULT_CHUNK_PRESET if chunk_preset is None else chunk_preset
        if mode not in SNIPPET_MODES:
            raise RequestError.invalid("snippetMode", "Invalid snippet mode")
        if preset not in CHUNK_PRESET_LIMITS:
            raise RequestError.invalid("chunkPreset", "Invalid chunk preset")

        host = self.store.get_host(host_id)
        if host is None:
            raise RequestError.not_found("Host")

        started = time.perf_counter()
        nodes = self.store.list_nodes(host_id)
        generated_at = isoformat(utc_now())
        blocks, truncated = build_pack_blocks(nodes, mode)  # type: ignore[arg-type]
        chunks = chunk_blocks(blocks, CHUNK_PRESET_LIMITS[preset])
        parts = assemble_parts(
            chunks,
            host=host,
            generated_at=generated_at,
            snippet_mode=mode,
            chunk_preset=preset,
            file_count=sum(1 for node in nodes if not node.is_dir),
        )

        PACK_DURATION.observe(time.perf_counter() - started)
        PACK_PARTS.labels(preset=preset).observe(len(parts))
        logger.info(
            "Generated context pack with %s parts",
            len(parts),
            extra={"ctx_host_id": host_id, "ctx_preset": preset, "ctx_mode": mode},
        )
        return ContextPack(
            host_id=host.id,
            generated_at=generated_at,
            truncated_file_count=truncated,
            parts=parts,
        )


__all__ = ["ContextPack", "ContextPackService", "SNIPPET_MODES"]
