"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

IMPORT_DURATION = Histogram(
    "lanmap_import_duration_seconds",
    "Time spent decoding and persisting a scan payload",
    registry=REGISTRY,
)

IMPORTED_ENTRIES = Counter(
    "lanmap_imported_entries_total",
    "Entries written by successful imports",
    registry=REGISTRY,
)

IMPORT_FAILURES = Counter(
    "lanmap_import_failures_total",
    "Rejected imports by error kind",
    labelnames=("kind",),
    registry=REGISTRY,
)

PACK_DURATION = Histogram(
    "lanmap_context_pack_duration_seconds",
    "Time spent generating a context pack",
    registry=REGISTRY,
)

PACK_PARTS = Histogram(
    "lanmap_context_pack_parts",
    "Number of parts per generated context pack",
    labelnames=("preset",),
    buckets=(1, 2, 3, 5, 8, 13, 21, 34, 55),
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "IMPORT_DURATION",
    "IMPORTED_ENTRIES",
    "IMPORT_FAILURES",
    "PACK_DURATION",
    "PACK_PARTS",
    "metrics_response",
]
