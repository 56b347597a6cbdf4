"""Domain models flowing through the ingestion pipeline."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field


def url_to_id(url: str) -> str:
    """Stable article id for a crawled URL (SHA-1 hex digest)."""
    return hashlib.sha1(url.encode("utf-8")).hexdigest()


class Article(BaseModel):
    """A single news article, immutable once fetched or loaded.

    Attributes
    ----------
    id:
        SHA-1 of the source URL for crawled pages, or the caller-supplied
        id for articles loaded from a file.
    title:
        Human-readable title (may be empty).
    url:
        Canonical source URL (may be empty for file-loaded articles).
    content:
        Extracted plain-text body.
    """

    model_config = {"frozen": True}

    id: str
    title: str = ""
    url: str = ""
    content: str = ""

    @property
    def dedupe_key(self) -> str:
        """Identity used for de-duplication: the URL, else the id."""
        return self.url or self.id


class Chunk(BaseModel):
    """One overlapping window of an article's text."""

    model_config = {"frozen": True}

    id: str
    text: str


class IndexPoint(BaseModel):
    """A vector plus payload ready to be written to the vector index."""

    id: int
    vector: list[float]
    payload: dict[str, Any] = Field(default_factory=dict)


@dataclass
class ChunkOutcome:
    """Result of pushing one chunk through embed → validate.

    Exactly one of ``point`` / ``reason`` is set.
    """

    article_id: str
    chunk_id: str
    point: IndexPoint | None = None
    reason: str = ""

    @classmethod
    def success(cls, article_id: str, chunk_id: str, point: IndexPoint) -> ChunkOutcome:
        return cls(article_id=article_id, chunk_id=chunk_id, point=point)

    @classmethod
    def skipped(cls, article_id: str, chunk_id: str, reason: str) -> ChunkOutcome:
        return cls(article_id=article_id, chunk_id=chunk_id, reason=reason)

    @property
    def ok(self) -> bool:
        return self.point is not None


@dataclass
class UpsertReport:
    """Counts produced by :class:`~news_rag.ingestion.upserter.Upserter`."""

    batches_written: int = 0
    batches_failed: int = 0
    points_written: int = 0
    points_failed: int = 0


@dataclass
class IngestionReport:
    """Aggregate outcome of an ingestion run."""

    articles_total: int = 0
    articles_unique: int = 0
    outcomes: list[ChunkOutcome] = field(default_factory=list)
    upsert: UpsertReport = field(default_factory=UpsertReport)

    @property
    def points(self) -> list[IndexPoint]:
        return [o.point for o in self.outcomes if o.point is not None]

    @property
    def skipped(self) -> list[ChunkOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def summary(self) -> str:
        return (
            f"{self.articles_unique} unique articles ({self.articles_total} loaded), "
            f"{len(self.points)} points prepared, {len(self.skipped)} chunks skipped, "
            f"{self.upsert.points_written} points upserted "
            f"({self.upsert.batches_failed} failed batches)"
        )
