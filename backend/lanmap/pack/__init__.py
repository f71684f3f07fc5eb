"""Context pack generation components."""

from .assembler import ContextPackPart, assemble_parts, build_pack_blocks
from .chunker import CHUNK_PRESET_LIMITS, PackBlock, chunk_blocks
from .scoring import rank_paths, score_path
from .service import ContextPack, ContextPackService
from .snippets import compact_snippet, escape_fence

__all__ = [
    "ContextPackPart",
    "assemble_parts",
    "build_pack_blocks",
    "CHUNK_PRESET_LIMITS",
    "PackBlock",
    "chunk_blocks",
    "rank_paths",
    "score_path",
    "ContextPack",
    "ContextPackService",
    "compact_snippet",
    "escape_fence",
]
