"""Abstract base class for vector-index backends.

Adding a new backend (Qdrant, Pinecone, Weaviate …) only requires
subclassing :class:`VectorIndex` and implementing the abstract methods.
The ingestion pipeline and the retriever are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from news_rag.ingestion.models import IndexPoint
    from news_rag.retrieval.models import SearchHit


class VectorIndex(ABC):
    """Backend-agnostic vector-index interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def ensure_collection(self) -> None:
        """Create the collection when it does not exist yet (idempotent)."""
        ...

    @abstractmethod
    def search(self, vector: list[float], limit: int = 4) -> list[SearchHit]:
        """Return the top-*limit* hits for *vector*, best first."""
        ...

    @abstractmethod
    def upsert(self, points: list[IndexPoint]) -> None:
        """Write *points*, returning only once the backend acknowledged them.

        Points with an existing id are overwritten.  Errors are raised.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- optional overrides ---------------------------------------------------

    def delete(self, ids: list[int]) -> None:
        """Delete points by their IDs.  Optional; raises by default."""
        raise NotImplementedError(f"{type(self).__name__} does not support delete")

    def delete_articles(self, article_ids: list[str]) -> None:
        """Delete every point whose payload ``article_id`` is in *article_ids*.

        Lets a re-run replace an article's chunks instead of adding a second
        copy under fresh point ids.  Optional; raises by default.
        """
        raise NotImplementedError(f"{type(self).__name__} does not support delete_articles")
