"""Identifiers for hosts, nodes and import runs."""

from __future__ import annotations

import uuid


def new_id(kind: str) -> str:
    """Return ``<kind>_<32 hex chars>``, e.g. ``host_3f2a...``."""
    return f"{kind}_{uuid.uuid4().hex}"
