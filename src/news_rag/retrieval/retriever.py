"""Semantic retriever: query text → embedding → top-k chunks.

Usage::

    from news_rag.retrieval.retriever import Retriever

    retriever = Retriever(embedder, index)
    for hit in retriever.retrieve("What happened in the markets today?"):
        print(hit.title, hit.url, hit.score)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from news_rag.ingestion.embedder import EmbeddingClient
    from news_rag.retrieval.base import VectorIndex
    from news_rag.retrieval.models import SearchHit

logger = logging.getLogger(__name__)


class Retriever:
    """High-level retriever over any :class:`VectorIndex`.

    Parameters
    ----------
    embedder:
        Client used to embed the query text.
    index:
        A concrete vector-index backend.
    default_k:
        Default number of hits returned by :meth:`retrieve`.
    score_threshold:
        Minimum similarity score; hits below this are discarded.
    """

    def __init__(
        self,
        embedder: EmbeddingClient,
        index: VectorIndex,
        *,
        default_k: int = 4,
        score_threshold: float = 0.0,
    ) -> None:
        self._embedder = embedder
        self._index = index
        self.default_k = default_k
        self.score_threshold = score_threshold

    def retrieve(self, query: str, *, k: int | None = None) -> list[SearchHit]:
        """Return up to *k* hits for *query*; failures are logged and yield ``[]``."""
        k = k or self.default_k
        try:
            vector = self._embedder.embed(query)
            if not vector:
                logger.warning("Empty query embedding; nothing to search")
                return []
            hits = self._index.search(vector, limit=k)
        except Exception as exc:
            logger.error("Retrieval error: %s", exc)
            return []

        return [h for h in hits if h.score is None or h.score >= self.score_threshold]
