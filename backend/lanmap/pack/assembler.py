"""Context pack content blocks, part headers and statistics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from lanmap.models.entities import FileNode, Host
from lanmap.pack.chunker import PackBlock
from lanmap.pack.scoring import rank_paths
from lanmap.pack.snippets import SnippetMode, compact_snippet, escape_fence
from lanmap.tree.builder import TreeNode, build_tree, iter_tree
from lanmap.utils.text import format_bytes

PACK_TITLE = "# LanMap Context Pack"
PRIORITY_PATH_LIMIT = 60
MAX_TREE_INDENT = 8
FENCE = "~~~"


@dataclass(slots=True)
class PartStats:
    files: int
    snippet_count: int
    chars: int


@dataclass(slots=True)
class ContextPackPart:
    index: int
    total: int
    content: str
    stats: PartStats


def build_pack_blocks(nodes: Sequence[FileNode], snippet_mode: SnippetMode) -> tuple[list[PackBlock], int]:
    """Return the ordered pack blocks and the number of truncated snippets."""
    if not nodes:
        return [], 0

    ordered = sorted(nodes, key=lambda node: node.path)
    files = [node for node in ordered if not node.is_dir]
    text_files = [
        node for node in files if node.content_type == "text" and isinstance(node.content, str)
    ]

    blocks = [
        _summary_block(ordered, files, text_files),
        _priority_block(files),
        _tree_block(build_tree(ordered)),
        _inventory_block(ordered),
        PackBlock(text="## Key Text Snippets"),
    ]

    truncated = 0
    for node in rank_paths(text_files, key=lambda item: item.path):
        snippet = compact_snippet(node.content or "", snippet_mode)
        if snippet.truncated:
            truncated += 1
        blocks.append(
            PackBlock(
                text="\n".join([f"### {node.path}", f"{FENCE}text", escape_fence(snippet.text), FENCE, ""]),
                snippet_count=1,
            )
        )
    return blocks, truncated


def render_tree_lines(roots: list[TreeNode]) -> list[str]:
    lines = []
    for depth, node in iter_tree(roots):
        indent = "  " * min(depth, MAX_TREE_INDENT)
        marker = "[D]" if node.type == "dir" else "[F]"
        lines.append(f"{indent}- {marker} {escape_fence(node.name)}")
    return lines


def render_header(
    host: Host,
    generated_at: str,
    index: int,
    total: int,
    snippet_mode: str,
    chunk_preset: str,
) -> str:
    return "\n".join(
        [
            PACK_TITLE,
            "",
            f"Host: {host.label} ({host.address})",
            f"Generated: {generated_at}",
            f"Part: {index}/{total}",
            f"Snippet mode: {snippet_mode}",
            f"Chunk preset: {chunk_preset}",
            "",
        ]
    )


def assemble_parts(
    chunks: Sequence[PackBlock],
    *,
    host: Host,
    generated_at: str,
    snippet_mode: str,
    chunk_preset: str,
    file_count: int,
) -> list[ContextPackPart]:
    total = len(chunks)
    parts = []
    for position, chunk in enumerate(chunks, start=1):
        header = render_header(host, generated_at, position, total, snippet_mode, chunk_preset)
        content = f"{header}{chunk.text.rstrip()}\n"
        parts.append(
            ContextPackPart(
                index=position,
                total=total,
                content=content,
                stats=PartStats(files=file_count, snippet_count=chunk.snippet_count, chars=len(content)),
            )
        )
    return parts


def _summary_block(nodes: Sequence[FileNode], files: list[FileNode], text_files: list[FileNode]) -> PackBlock:
    directories = len(nodes) - len(files)
    binary = sum(1 for node in files if node.content_type == "binary")
    hidden = sum(1 for node in nodes if node.is_hidden)
    return PackBlock(
        text="\n".join(
            [
                "## Host Summary",
                f"- Total entries: {len(nodes)}",
                f"- Directories: {directories}",
                f"- Files: {len(files)}",
                f"- Text files: {len(text_files)}",
                f"- Binary files: {binary}",
                f"- Hidden entries: {hidden}",
                "",
            ]
        )
    )


def _priority_block(files: list[FileNode]) -> PackBlock:
    top = rank_paths(files, key=lambda node: node.path)[:PRIORITY_PATH_LIMIT]
    lines = ["## Priority Paths"]
    lines.extend(f"- `{node.path}` ({node.content_type})" for node in top)
    lines.append("")
    return PackBlock(text="\n".join(lines))


def _tree_block(roots: list[TreeNode]) -> PackBlock:
    lines = ["## Directory Tree", f"{FENCE}text", *render_tree_lines(roots), FENCE, ""]
    return PackBlock(text="\n".join(lines))


def _inventory_block(nodes: Sequence[FileNode]) -> PackBlock:
    lines = ["## File Inventory"]
    for node in nodes:
        kind = "dir" if node.is_dir else "file"
        lines.append(
            f"- `{node.path}` | {kind} | {format_bytes(node.size)} | {node.mtime or '-'} | {node.content_type}"
        )
    lines.append("")
    return PackBlock(text="\n".join(lines))


__all__ = [
    "ContextPackPart",
    "PartStats",
    "build_pack_blocks",
    "render_tree_lines",
    "render_header",
    "assemble_parts",
]
