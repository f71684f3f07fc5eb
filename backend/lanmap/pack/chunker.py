"""Greedy packing of pack blocks into size-bounded parts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Sequence

ChunkPreset = Literal["small", "medium", "large"]

CHUNK_PRESET_LIMITS: dict[str, int] = {
    "small": 12_000,
    "medium": 24_000,
    "large": 40_000,
}
MIN_NEWLINE_SPLIT = 200
EMPTY_PACK_TEXT = "No data available."


@dataclass(slots=True)
class PackBlock:
    text: str
    snippet_count: int = 0


@dataclass(slots=True)
class _PartAccumulator:
    max_chars: int
    text: str = ""
    snippet_count: int = 0
    parts: list[PackBlock] = field(default_factory=list)

    def fits(self, piece: str) -> bool:
        return len(self.text) + len(piece) <= self.max_chars

    def flush(self) -> None:
        trimmed = self.text.strip()
        if not trimmed:
            return
        self.parts.append(PackBlock(text=trimmed, snippet_count=self.snippet_count))
        self.text = ""
        self.snippet_count = 0


def chunk_blocks(blocks: Sequence[PackBlock], max_chars: int) -> list[PackBlock]:
    """Pack ``blocks`` in order into parts of at most ``max_chars`` characters.

    Oversized blocks are split on newlines, or cut at exactly ``max_chars``
    when no usable newline exists.  A block's snippet count is credited to
    the part holding its first piece.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be positive")

    acc = _PartAccumulator(max_chars=max_chars)
    for block in blocks:
        counted = False
        for piece in split_for_limit(f"{block.text.strip()}\n\n", max_chars):
            normalized = f"{piece.strip()}\n\n"
            if len(normalized) > max_chars:
                for start in range(0, len(normalized), max_chars):
                    window = normalized[start : start + max_chars]
                    if not acc.fits(window):
                        acc.flush()
                    acc.text += window
                    if block.snippet_count > 0 and not counted:
                        acc.snippet_count += block.snippet_count
                        counted = True
                    acc.flush()
                continue

            if not acc.fits(normalized):
                acc.flush()
            acc.text += normalized
            if block.snippet_count > 0 and not counted:
                acc.snippet_count += block.snippet_count
                counted = True

    acc.flush()
    return acc.parts or [PackBlock(text=EMPTY_PACK_TEXT, snippet_count=0)]


def split_for_limit(content: str, max_chars: int) -> list[str]:
    """Split on the last newline inside each ``max_chars`` window."""
    if len(content) <= max_chars:
        return [content]

    pieces: list[str] = []
    remaining = content
    while remaining:
        if len(remaining) <= max_chars:
            pieces.append(remaining)
            break
        split_at = remaining.rfind("\n", 0, max_chars + 1)
        if split_at < MIN_NEWLINE_SPLIT:
            split_at = max_chars
        pieces.append(remaining[:split_at])
        remaining = remaining[split_at:].lstrip()
    return pieces


__all__ = [
    "ChunkPreset",
    "CHUNK_PRESET_LIMITS",
    "EMPTY_PACK_TEXT",
    "PackBlock",
    "chunk_blocks",
    "split_for_limit",
]
