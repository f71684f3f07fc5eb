"""Text processing helpers."""

from __future__ import annotations


def format_bytes(value: int | float | None) -> str:
    """Human-readable size: bytes, then KB and MB with one decimal."""
    if value is None or value < 0:
        return "-"
    if value < 1024:
        return f"{value} B"
    kb = value / 1024
    if kb < 1024:
        return f"{kb:.1f} KB"
    return f"{kb / 1024:.1f} MB"
