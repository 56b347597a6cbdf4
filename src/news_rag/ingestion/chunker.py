"""Text chunking into fixed-size overlapping windows."""

from __future__ import annotations

from collections.abc import Iterator

from news_rag.ingestion.models import Chunk


def iter_chunks(text: str, chunk_size: int = 800, overlap: int = 100) -> Iterator[Chunk]:
    """Yield overlapping windows of *text*, left to right.

    Parameters
    ----------
    text:
        Article body to split.
    chunk_size:
        Maximum number of characters per chunk.
    overlap:
        Number of characters repeated between consecutive windows.

    Yields
    ------
    Chunk
        ``chunk_<n>`` ids numbered from 0; whitespace-only windows are
        dropped without consuming an ordinal.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError(f"overlap ({overlap}) must be in [0, chunk_size={chunk_size})")

    start = 0
    idx = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        piece = text[start:end].strip()
        if piece:
            yield Chunk(id=f"chunk_{idx}", text=piece)
            idx += 1
        if end == len(text):
            break
        start = end - overlap


def chunk_text(text: str, chunk_size: int = 800, overlap: int = 100) -> list[Chunk]:
    """Split *text* into a list of overlapping chunks (see :func:`iter_chunks`)."""
    return list(iter_chunks(text, chunk_size=chunk_size, overlap=overlap))
