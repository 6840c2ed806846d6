from __future__ import annotations
from typing import List
from unbind.utils.exception import ChunkingConfigError
from unbind.utils.types import Chunk


def validate_window(chunk_size: int, chunk_overlap: int) -> None:
    if chunk_size <= 0:
        raise ChunkingConfigError(f"chunk_size must be positive (got {chunk_size})")
    if chunk_overlap < 0 or chunk_overlap >= chunk_size:
        raise ChunkingConfigError(
            f"chunk_overlap must be in [0, chunk_size) (got overlap={chunk_overlap}, size={chunk_size})"
        )


def chunk_document(text: str, chunk_size: int = 4000, chunk_overlap: int = 400) -> List[Chunk]:
    """Split text into fixed-size character windows that overlap by ``chunk_overlap``.

    Windows start at 0 and advance by ``chunk_size - chunk_overlap`` until the start
    reaches the end of the text; the last window is clipped and may be shorter.
    Text no longer than one window is returned whole as a single chunk.
    """
    validate_window(chunk_size, chunk_overlap)
    if len(text) <= chunk_size:
        return [Chunk(index=0, start=0, content=text)]
    step = chunk_size - chunk_overlap
    chunks: List[Chunk] = []
    for i, start in enumerate(range(0, len(text), step)):
        chunks.append(Chunk(index=i, start=start, content=text[start:start + chunk_size]))
    return chunks


def chunk_text(text: str, chunk_size: int = 4000, chunk_overlap: int = 400) -> List[str]:
    return [c.content for c in chunk_document(text, chunk_size, chunk_overlap)]


def reconstruct(chunks: List[str], chunk_size: int, chunk_overlap: int) -> str:
    """Inverse of ``chunk_text``: join each chunk's non-overlapping prefix."""
    if len(chunks) <= 1:
        return chunks[0] if chunks else ""
    step = chunk_size - chunk_overlap
    parts = [c[:step] for c in chunks[:-1]]
    return "".join(parts) + chunks[-1]
