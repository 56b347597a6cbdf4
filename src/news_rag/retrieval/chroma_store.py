"""Chroma implementation of the vector-index abstraction."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import chromadb

from news_rag.config import settings
from news_rag.retrieval.base import VectorIndex
from news_rag.retrieval.models import SearchHit

if TYPE_CHECKING:
    from news_rag.ingestion.models import IndexPoint

logger = logging.getLogger(__name__)


def _flat_metadata(payload: dict[str, Any]) -> dict[str, str | int | float | bool]:
    """Chroma metadata values must be flat str/int/float/bool."""
    return {
        k: v
        for k, v in payload.items()
        if k != "text" and isinstance(v, (str, int, float, bool))
    }


class ChromaVectorIndex(VectorIndex):
    """Chroma-backed vector index using cosine distance.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    client:
        Pre-built Chroma client; when given, *host* and *port* are ignored.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        client: Any | None = None,
    ) -> None:
        super().__init__(collection_name)
        self._client = client if client is not None else chromadb.HttpClient(host=host, port=port)
        self._collection = None

    # -- VectorIndex overrides ------------------------------------------------

    def ensure_collection(self) -> None:
        if self._collection is None:
            self._collection = self._client.get_or_create_collection(
                name=self.collection_name,
                metadata={"hnsw:space": "cosine"},
            )
            logger.info("Collection %r ready", self.collection_name)

    def search(self, vector: list[float], limit: int = 4) -> list[SearchHit]:
        self.ensure_collection()
        results = self._collection.query(
            query_embeddings=[vector],
            n_results=limit,
            include=["documents", "metadatas", "distances"],
        )

        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits: list[SearchHit] = []
        for content, meta, dist in zip(docs, metas, distances):
            meta = meta or {}
            hits.append(
                SearchHit(
                    text=content or "",
                    title=meta.get("title") or "unknown",
                    url=meta.get("url") or "unknown",
                    chunk_id=meta.get("chunk_id"),
                    # cosine space: distance = 1 - similarity
                    score=None if dist is None else 1.0 - dist,
                )
            )
        return hits

    def upsert(self, points: list[IndexPoint]) -> None:
        if not points:
            return
        self.ensure_collection()
        self._collection.upsert(
            ids=[str(p.id) for p in points],
            embeddings=[p.vector for p in points],
            documents=[str(p.payload.get("text", "")) for p in points],
            metadatas=[_flat_metadata(p.payload) or {"point_id": str(p.id)} for p in points],
        )

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    def delete(self, ids: list[int]) -> None:
        self.ensure_collection()
        self._collection.delete(ids=[str(i) for i in ids])

    def delete_articles(self, article_ids: list[str]) -> None:
        if not article_ids:
            return
        self.ensure_collection()
        self._collection.delete(where={"article_id": {"$in": list(article_ids)}})
