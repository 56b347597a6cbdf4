"""Embedding providers and the order-preserving, retrying batch client."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import requests

if TYPE_CHECKING:
    from news_rag.config import Settings

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """One remote (or local) embedding call per :meth:`embed` invocation."""

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per text, in input order.

        Implementations may return fewer vectors than inputs; the
        :class:`EmbeddingClient` pads the gap.  Errors are raised, not
        swallowed, so the client can retry.
        """
        ...


class JinaEmbeddingProvider(EmbeddingProvider):
    """Hosted embedding API speaking the ``/v1/embeddings`` JSON shape.

    Parameters
    ----------
    api_url:
        Full embeddings endpoint, e.g. ``https://api.jina.ai/v1/embeddings``.
    api_key:
        Bearer token.
    model:
        Model identifier sent with every request.
    timeout:
        Request timeout in seconds.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        model: str,
        *,
        timeout: float = 60.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        )

    def embed(self, texts: list[str]) -> list[list[float]]:
        resp = self._session.post(
            self.api_url,
            json={"input": texts, "model": self.model},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json().get("data") or []
        # Some backends return items out of order together with an index.
        if all(isinstance(d, dict) and "index" in d for d in data):
            data = sorted(data, key=lambda d: d["index"])
        return [(d or {}).get("embedding") or [] for d in data]


class HuggingFaceEmbeddingProvider(EmbeddingProvider):
    """Local sentence-transformer backend (no network, no API key)."""

    def __init__(self, model_name: str, *, normalize_embeddings: bool = True) -> None:
        from langchain_huggingface import HuggingFaceEmbeddings

        self.model_name = model_name
        self._embedder = HuggingFaceEmbeddings(
            model_name=model_name,
            encode_kwargs={"normalize_embeddings": normalize_embeddings},
        )

    def embed(self, texts: list[str]) -> list[list[float]]:
        return self._embedder.embed_documents(texts)


class EmbeddingClient:
    """Batch embedder that preserves input order and retries with backoff.

    Parameters
    ----------
    provider:
        Backend performing the actual embedding call.
    max_retries:
        Retries after the first failed attempt; the last error propagates.
    backoff:
        Initial wait in seconds, doubled after every failure.
    max_backoff:
        Upper bound for a single wait.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        *,
        max_retries: int = 3,
        backoff: float = 1.0,
        max_backoff: float = 30.0,
    ) -> None:
        self.provider = provider
        self.max_retries = max(0, max_retries)
        self.backoff = backoff
        self.max_backoff = max_backoff

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts*; the result has the same length and order.

        Empty or whitespace-only texts are never sent and map to ``[]``.
        Missing or empty vectors in the response are also ``[]``.
        """
        if not texts:
            return []

        requests_: list[str] = []
        index_map: list[int | None] = []
        for text in texts:
            if not text or not text.strip():
                index_map.append(None)
            else:
                index_map.append(len(requests_))
                requests_.append(text)

        if not requests_:
            return [[] for _ in texts]

        vectors = self._call_with_retry(requests_)
        vectors = [list(v) if v else [] for v in vectors[: len(requests_)]]
        vectors.extend([] for _ in range(len(requests_) - len(vectors)))

        return [[] if pos is None else vectors[pos] for pos in index_map]

    def embed(self, text: str) -> list[float]:
        """Embed a single text (e.g. a user query)."""
        result = self.embed_batch([text])
        return result[0] if result else []

    def _call_with_retry(self, texts: list[str]) -> list[list[float]]:
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return self.provider.embed(texts) or []
            except Exception as exc:
                retries_left = attempts - attempt
                logger.warning(
                    "Embedding attempt %d failed. Retries left: %d. Error: %s",
                    attempt,
                    retries_left,
                    exc,
                )
                if retries_left == 0:
                    raise
                time.sleep(min(self.backoff * 2 ** (attempt - 1), self.max_backoff))
        return []  # pragma: no cover


def build_embedding_provider(settings: Settings) -> EmbeddingProvider:
    """Return the provider selected by ``settings.embedding_backend``."""
    backend = settings.embedding_backend.lower()
    if backend == "jina":
        if not settings.embedding_api_key:
            logger.warning("EMBEDDING_API_KEY not set; embedding calls will likely fail")
        return JinaEmbeddingProvider(
            settings.embedding_api_url,
            settings.embedding_api_key,
            settings.embedding_model,
            timeout=settings.embedding_timeout,
        )
    if backend == "huggingface":
        return HuggingFaceEmbeddingProvider(settings.embedding_model)
    raise ValueError(
        f"Unsupported embedding_backend={settings.embedding_backend!r}. "
        "Choose from: jina, huggingface."
    )
