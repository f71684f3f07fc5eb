"""Path interestingness heuristics used to order pack content."""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

T = TypeVar("T")

PRIORITY_HINTS: tuple[str, ...] = (
    ".env",
    "credential",
    "password",
    "secret",
    "token",
    "key",
    "id_rsa",
    "id_ed25519",
    ".ssh",
    "history",
    "config",
    "kube",
    "aws",
    "docker",
    "backup",
    "readme",
    "todo",
    "notes",
)
HINT_WEIGHT = 12
DOC_EXTENSION_WEIGHT = 3
SYSTEM_DIR_WEIGHT = 2


def score_path(path: str) -> int:
    lower = path.lower()
    score = sum(HINT_WEIGHT for hint in PRIORITY_HINTS if hint in lower)
    if lower.endswith((".md", ".txt")):
        score += DOC_EXTENSION_WEIGHT
    if "/etc/" in lower or "/home/" in lower:
        score += SYSTEM_DIR_WEIGHT
    return score


def rank_key(path: str) -> tuple[int, str]:
    """Sort key: higher score first, then path in code point order."""
    return -score_path(path), path


def rank_paths(items: Iterable[T], key: Callable[[T], str]) -> list[T]:
    return sorted(items, key=lambda item: rank_key(key(item)))


__all__ = ["PRIORITY_HINTS", "score_path", "rank_key", "rank_paths"]
