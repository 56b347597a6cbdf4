"""Domain models for search hits and the sources cited in answers."""

from __future__ import annotations

from pydantic import BaseModel


class SearchHit(BaseModel):
    """A single chunk returned by the vector index.

    Attributes
    ----------
    text:
        Chunk text stored as payload.
    title:
        Title of the parent article (``"unknown"`` when absent).
    url:
        Source URL of the parent article (``"unknown"`` when absent).
    chunk_id:
        Ordinal id of the chunk within its article.
    score:
        Similarity score reported by the index (higher = more similar).
    """

    text: str = ""
    title: str = "unknown"
    url: str = "unknown"
    chunk_id: str | None = None
    score: float | None = None


class SourceRef(BaseModel):
    """A numbered source as cited in an answer (``[1]`` → ``id=1``)."""

    id: int
    title: str
    url: str
    chunk_id: str | None = None

    @classmethod
    def from_hits(cls, hits: list[SearchHit]) -> list[SourceRef]:
        return [
            cls(id=i, title=h.title, url=h.url, chunk_id=h.chunk_id)
            for i, h in enumerate(hits, start=1)
        ]
