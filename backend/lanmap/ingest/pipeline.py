"""Import pipeline orchestration."""

from __future__ import annotations

import posixpath
import time

from lanmap.core.config import Settings
from lanmap.core.errors import LanMapError
from lanmap.core.logging import get_logger
from lanmap.core.metrics import IMPORT_DURATION, IMPORT_FAILURES, IMPORTED_ENTRIES
from lanmap.db.store import NodeStore
from lanmap.ingest.payload import decode_payload
from lanmap.ingest.types import DecodedPayload, ImportResult, ValidatedEntry
from lanmap.models.entities import ImportRun
from lanmap.utils.ids import new_id
from lanmap.utils.time import now_ms

logger = get_logger(__name__)


class ImportPipeline:
    """Decode a scan payload and replace the host's stored tree with it."""

    def __init__(self, store: NodeStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    def import_payload(self, payload: str) -> ImportResult:
        started = time.perf_counter()
        try:
            decoded = decode_payload(
                payload,
                max_payload_chars=self.settings.max_payload_chars,
                max_decompressed_bytes=self.settings.max_decompressed_bytes,
                max_path_depth=self.settings.max_path_depth,
            )
        except LanMapError as exc:
            IMPORT_FAILURES.labels(kind=exc.kind.value).inc()
            logger.warning("Rejected payload: %s", exc.message, extra={"ctx_kind": exc.kind.value})
            raise

        data = decoded.data
        warnings = collect_warnings(data.entries)
        host, imported = self.store.replace_host_nodes(
            data.host.label,
            data.host.address,
            data.entries,
            lambda host_id: build_import_run(host_id, decoded, warnings),
        )

        elapsed = time.perf_counter() - started
        IMPORT_DURATION.observe(elapsed)
        IMPORTED_ENTRIES.inc(imported)
        logger.info(
            "Imported %s entries for %s",
            imported,
            data.host.address,
            extra={
                "ctx_host_id": host.id,
                "ctx_compression": decoded.compression,
                "ctx_payload_bytes": decoded.raw_byte_size,
                "ctx_warnings": len(warnings),
                "ctx_elapsed_ms": round(elapsed * 1000, 1),
            },
        )
        return ImportResult(host_id=host.id, imported_count=imported, skipped_count=0, warnings=warnings)


def build_import_run(host_id: str, decoded: DecodedPayload, warnings: list[str]) -> ImportRun:
    data = decoded.data
    run_path = data.run_path or data.root_path
    run_parent_path = data.run_parent_path or posixpath.dirname(run_path)
    return ImportRun(
        id=new_id("run"),
        host_id=host_id,
        version=data.version,
        generated_at=data.generated_at,
        root_path=data.root_path,
        run_path=run_path,
        run_parent_path=run_parent_path,
        entry_count=len(data.entries),
        payload_size=decoded.raw_byte_size,
        warnings="\n".join(warnings) if warnings else None,
        created_at=now_ms(),
    )


def collect_warnings(entries: list[ValidatedEntry]) -> list[str]:
    """Non-fatal observations about entries whose content will not be stored."""
    warnings: list[str] = []
    for entry in entries:
        if entry.type != "file":
            continue
        if entry.content_type == "text" and entry.content is None:
            warnings.append(f"Text file has no content: {entry.path}")
        elif entry.content_type != "text" and entry.content:
            warnings.append(f"Content discarded for {entry.content_type} file: {entry.path}")
    return warnings


__all__ = ["ImportPipeline", "build_import_run", "collect_warnings"]
