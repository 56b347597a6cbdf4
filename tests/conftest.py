"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from news_rag.generation.generator import AnswerGenerator
from news_rag.ingestion.embedder import EmbeddingClient, EmbeddingProvider
from news_rag.ingestion.models import IndexPoint
from news_rag.retrieval.base import VectorIndex
from news_rag.retrieval.models import SearchHit

DIM = 8


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes for the narrow service interfaces ─────────────────────────────


class FakeEmbeddingProvider(EmbeddingProvider):
    """Deterministic embeddings: ``[len(text)] * dim``; records every call."""

    def __init__(self, dim: int = DIM, *, fail_times: int = 0, drop_last: int = 0) -> None:
        self.dim = dim
        self.fail_times = fail_times
        self.drop_last = drop_last
        self.calls: list[list[str]] = []

    def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ConnectionError("embedding API unavailable")
        vectors = [[float(len(t))] * self.dim for t in texts]
        return vectors[: len(vectors) - self.drop_last] if self.drop_last else vectors


class FakeVectorIndex(VectorIndex):
    """In-memory index keyed by point id; can fail selected upsert batches."""

    def __init__(self, hits: list[SearchHit] | None = None, *, fail_batches: set[int] | None = None) -> None:
        super().__init__("test-collection")
        self.hits = hits or []
        self.fail_batches = fail_batches or set()
        self.points: dict[int, IndexPoint] = {}
        self.batches: list[list[IndexPoint]] = []
        self.ensured = 0
        self.searches: list[tuple[list[float], int]] = []
        self.deleted_articles: list[list[str]] = []

    def ensure_collection(self) -> None:
        self.ensured += 1

    def search(self, vector: list[float], limit: int = 4) -> list[SearchHit]:
        self.searches.append((vector, limit))
        return self.hits[:limit]

    def upsert(self, points: list[IndexPoint]) -> None:
        batch_no = len(self.batches) + 1
        self.batches.append(list(points))
        if batch_no in self.fail_batches:
            raise RuntimeError(f"batch {batch_no} rejected")
        for p in points:
            self.points[p.id] = p

    def delete_articles(self, article_ids: list[str]) -> None:
        self.deleted_articles.append(list(article_ids))
        self.points = {k: p for k, p in self.points.items() if p.payload.get("article_id") not in article_ids}

    def health_check(self) -> bool:
        return True


class FakeAnswerGenerator(AnswerGenerator):
    """Echoes a fixed answer and remembers prompts."""

    def __init__(self, answer: str = "Markets rallied [1].", pieces: list[str] | None = None) -> None:
        self.answer = answer
        self.pieces = pieces
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer

    def stream(self, prompt: str) -> Iterator[str]:
        self.prompts.append(prompt)
        yield from (self.pieces if self.pieces is not None else [self.answer])


class FakeFetcher:
    """Serves canned bodies by URL; unknown URLs behave like exhausted retries."""

    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.requested: list[str] = []

    def get(self, url: str) -> str | None:
        self.requested.append(url)
        return self.pages.get(url)


SAMPLE_HITS = [
    SearchHit(text="Stocks rose sharply on Monday.", title="Markets", url="https://n.example/a", chunk_id="chunk_0", score=0.91),
    SearchHit(text="Oil prices fell.", title="Energy", url="https://n.example/b", chunk_id="chunk_2", score=0.74),
]


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Make every pacing / retry pause instant; returns the requested delays."""
    delays: list[float] = []
    monkeypatch.setattr("time.sleep", delays.append)
    return delays


@pytest.fixture()
def provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture()
def embedder(provider: FakeEmbeddingProvider) -> EmbeddingClient:
    return EmbeddingClient(provider, max_retries=2, backoff=0.5)


@pytest.fixture()
def index() -> FakeVectorIndex:
    return FakeVectorIndex(hits=list(SAMPLE_HITS))
