"""Rendering of file text for inclusion in a context pack."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

SnippetMode = Literal["compact", "full"]

COMPACT_SNIPPET_LIMIT = 700
TRUNCATION_MARKER = "...[compact snippet truncated]"

_FENCE_RUN_RE = re.compile(r"~{3,}")


@dataclass(slots=True)
class Snippet:
    text: str
    truncated: bool


def normalize_text(text: str) -> str:
    return text.replace("\r", "").replace("\x00", "")


def compact_snippet(text: str, mode: SnippetMode = "compact") -> Snippet:
    normalized = normalize_text(text)
    if mode == "full" or len(normalized) <= COMPACT_SNIPPET_LIMIT:
        return Snippet(text=normalized, truncated=False)
    return Snippet(
        text=f"{normalized[:COMPACT_SNIPPET_LIMIT]}\n{TRUNCATION_MARKER}",
        truncated=True,
    )


def escape_fence(text: str) -> str:
    """Break up every run of three or more tildes so ``~~~`` cannot occur."""
    return _FENCE_RUN_RE.sub(lambda match: " ".join(match.group()), text)


__all__ = [
    "SnippetMode",
    "Snippet",
    "COMPACT_SNIPPET_LIMIT",
    "TRUNCATION_MARKER",
    "normalize_text",
    "compact_snippet",
    "escape_fence",
]
