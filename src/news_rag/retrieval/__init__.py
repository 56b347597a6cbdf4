"""
Retrieval — vector index abstraction and query-time search.

This module wraps the vector database behind a small interface so that
neither the ingestion pipeline nor the chat service needs to know which
database backs retrieval.

Public surface
--------------
- :class:`Retriever` — embed a query and fetch the top-k chunks.
- :class:`VectorIndex` — abstract backend (subclass for Qdrant, etc.).
- :class:`ChromaVectorIndex` — default Chroma backend.
- :class:`SearchHit`, :class:`SourceRef` — data models.
"""

from news_rag.retrieval.base import VectorIndex
from news_rag.retrieval.models import SearchHit, SourceRef
from news_rag.retrieval.retriever import Retriever

__all__ = [
    "ChromaVectorIndex",
    "Retriever",
    "SearchHit",
    "SourceRef",
    "VectorIndex",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorIndex to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorIndex":
        from news_rag.retrieval.chroma_store import ChromaVectorIndex

        return ChromaVectorIndex
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
