"""Ingestion driver: discover → fetch → extract → chunk → embed → upsert.

Everything runs sequentially with small pauses between network calls.
A bad article or chunk is logged and skipped; only a missing URL list,
an unreadable input file, or (by default) an embedding batch that keeps
failing ends the run with :class:`~news_rag.exceptions.IngestionError`.

Usage::

    from news_rag.ingestion.pipeline import IngestionPipeline
    from news_rag.config import settings

    report = IngestionPipeline.from_settings(settings).run(limit=20)
    print(report.summary())
"""

from __future__ import annotations

import json
import logging
import re
import time
from pathlib import Path
from typing import TYPE_CHECKING

from news_rag.exceptions import IngestionError
from news_rag.ingestion.chunker import chunk_text
from news_rag.ingestion.extractor import MIN_ARTICLE_CHARS, clean_text, extract_article_text
from news_rag.ingestion.ids import PointIdGenerator
from news_rag.ingestion.models import (
    Article,
    ChunkOutcome,
    IndexPoint,
    IngestionReport,
    url_to_id,
)
from news_rag.ingestion.sitemap import discover_urls
from news_rag.ingestion.upserter import Upserter

if TYPE_CHECKING:
    from news_rag.config import Settings
    from news_rag.ingestion.embedder import EmbeddingClient
    from news_rag.ingestion.fetcher import Fetcher
    from news_rag.retrieval.base import VectorIndex

logger = logging.getLogger(__name__)

_SIZE_ARTIFACTS = re.compile(r"Text(Small|Medium|Large)", re.IGNORECASE)


def clean_chunk_text(text: str | None, max_len: int = 2000) -> str:
    """Strip font-size widget labels, collapse whitespace, cap at *max_len*."""
    if not text:
        return ""
    cleaned = clean_text(_SIZE_ARTIFACTS.sub("", text))
    return cleaned[:max_len]


def clean_title(title: str | None) -> str:
    """Drop the by-line that publishers glue onto titles."""
    return clean_chunk_text((title or "").split("By")[0], 200)


def dedupe_articles(articles: list[Article]) -> list[Article]:
    """Keep the first article per URL (or id when the URL is empty)."""
    seen: set[str] = set()
    unique: list[Article] = []
    for article in articles:
        key = article.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(article)
    return unique


def load_articles_from_file(path: str | Path) -> list[Article]:
    """Load a JSON array of ``{id, title, url, content}`` objects.

    Raises
    ------
    IngestionError
        When the file cannot be read or is not a JSON array.
    """
    path = Path(path)
    try:
        items = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise IngestionError(f"Failed to read JSON: {exc}", details={"path": str(path)}) from exc

    if not isinstance(items, list):
        raise IngestionError("Input file must contain a JSON array", details={"path": str(path)})

    articles = [
        Article(
            id=str(item.get("id") or f"local_{i}"),
            title=str(item.get("title") or ""),
            url=str(item.get("url") or ""),
            content=str(item.get("content") or ""),
        )
        for i, item in enumerate(items)
        if isinstance(item, dict)
    ]
    logger.info("Loaded %d articles from file", len(articles))
    return articles


class IngestionPipeline:
    """Sequential ingestion run over a fetcher, an embedder and an index.

    Parameters
    ----------
    fetcher:
        HTTP fetcher for sitemaps and article pages.
    embedder:
        Batch embedding client.
    index:
        Target vector index.
    sitemap_index:
        URL of the sitemap index to crawl.
    chunk_size / chunk_overlap:
        Text chunking parameters.
    embed_batch_size:
        Number of chunks per embedding request.
    vector_size:
        Expected embedding dimensionality; other vectors are skipped.
    upsert_batch_size:
        Number of points per upsert call.
    sitemap_delay / article_delay / embed_delay / upsert_delay:
        Pauses (seconds) between consecutive network operations.
    skip_failed_embedding_batches:
        When ``True`` a batch that still fails after retries is recorded as
        skipped instead of aborting the run.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        embedder: EmbeddingClient,
        index: VectorIndex,
        *,
        sitemap_index: str = "",
        chunk_size: int = 800,
        chunk_overlap: int = 100,
        embed_batch_size: int = 16,
        vector_size: int = 768,
        upsert_batch_size: int = 128,
        sitemap_delay: float = 0.15,
        article_delay: float = 0.2,
        embed_delay: float = 0.15,
        upsert_delay: float = 0.1,
        skip_failed_embedding_batches: bool = False,
    ) -> None:
        if embed_batch_size <= 0:
            raise ValueError(f"embed_batch_size must be positive, got {embed_batch_size}")
        self.fetcher = fetcher
        self.embedder = embedder
        self.index = index
        self.sitemap_index = sitemap_index
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.embed_batch_size = embed_batch_size
        self.vector_size = vector_size
        self.sitemap_delay = sitemap_delay
        self.article_delay = article_delay
        self.embed_delay = embed_delay
        self.skip_failed_embedding_batches = skip_failed_embedding_batches
        self.upserter = Upserter(index, batch_size=upsert_batch_size, delay=upsert_delay)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        fetcher: Fetcher | None = None,
        embedder: EmbeddingClient | None = None,
        index: VectorIndex | None = None,
    ) -> IngestionPipeline:
        """Build a pipeline wired to the configured services."""
        if fetcher is None:
            from news_rag.ingestion.fetcher import Fetcher

            fetcher = Fetcher(
                settings.user_agent,
                timeout=settings.fetch_timeout,
                retries=settings.fetch_retries,
                retry_delay=settings.fetch_retry_delay,
            )
        if embedder is None:
            from news_rag.ingestion.embedder import EmbeddingClient, build_embedding_provider

            embedder = EmbeddingClient(
                build_embedding_provider(settings), max_retries=settings.embed_max_retries
            )
        if index is None:
            from news_rag.retrieval.chroma_store import ChromaVectorIndex

            index = ChromaVectorIndex(
                settings.chroma_collection, host=settings.chroma_host, port=settings.chroma_port
            )
        return cls(
            fetcher,
            embedder,
            index,
            sitemap_index=settings.sitemap_index,
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            embed_batch_size=settings.embed_batch_size,
            vector_size=settings.vector_size,
            upsert_batch_size=settings.upsert_batch_size,
            sitemap_delay=settings.sitemap_delay,
            article_delay=settings.article_delay,
            embed_delay=settings.embed_delay,
            upsert_delay=settings.upsert_delay,
            skip_failed_embedding_batches=settings.skip_failed_embedding_batches,
        )

    # -- public API -----------------------------------------------------------

    def run(self, limit: int = 50, from_file: str | Path | None = None) -> IngestionReport:
        """Run one ingestion, from *from_file* when given, else by crawling.

        Re-running over the same articles is safe: their previous points are
        deleted by ``article_id`` before the new ones are written (see
        :meth:`ingest_articles`).
        """
        logger.info("Starting news ingestion")
        self.index.ensure_collection()

        articles = load_articles_from_file(from_file) if from_file else self.crawl(limit)
        if not articles:
            logger.warning("No valid articles to ingest")
            return IngestionReport()
        return self.ingest_articles(articles)

    def crawl(self, limit: int) -> list[Article]:
        """Discover up to *limit* URLs and turn each page into an :class:`Article`."""
        urls = discover_urls(self.fetcher, self.sitemap_index, limit, delay=self.sitemap_delay)
        if not urls:
            raise IngestionError("No URLs fetched from sitemap", details={"sitemap": self.sitemap_index})

        articles: list[Article] = []
        for i, url in enumerate(urls, start=1):
            logger.info("[%d/%d] Fetching: %s", i, len(urls), url)
            article = self._fetch_article(url)
            if article is not None:
                articles.append(article)
            time.sleep(self.article_delay)
        return articles

    def ingest_articles(
        self,
        articles: list[Article],
        id_generator: PointIdGenerator | None = None,
    ) -> IngestionReport:
        """Chunk, embed and upsert *articles*; returns a per-chunk report.

        Point ids are fresh for every run, so existing points of the articles
        being written are removed first.  Backends without
        :meth:`~news_rag.retrieval.base.VectorIndex.delete_articles` keep them.
        """
        ids = id_generator or PointIdGenerator()
        unique = dedupe_articles(articles)
        report = IngestionReport(articles_total=len(articles), articles_unique=len(unique))
        logger.info("%d unique articles to index", len(unique))

        for article in unique:
            report.outcomes.extend(self._process_article(article, ids))

        points = report.points
        if not points:
            logger.warning("No embeddings generated, skipping upsert")
            return report

        self._replace_existing(points)
        logger.info("Prepared %d points. Starting upsert", len(points))
        report.upsert = self.upserter.upsert(points)
        logger.info("Ingestion complete: %s", report.summary())
        return report

    # -- internals ------------------------------------------------------------

    def _replace_existing(self, points: list[IndexPoint]) -> None:
        article_ids = list(dict.fromkeys(str(p.payload["article_id"]) for p in points))
        try:
            self.index.delete_articles(article_ids)
        except NotImplementedError:
            logger.warning("%s cannot delete by article; earlier points are kept", type(self.index).__name__)
        except Exception as exc:
            logger.error("Failed to delete previous points for %d articles: %s", len(article_ids), exc)
        else:
            logger.info("Removed previous points for %d articles", len(article_ids))

    def _fetch_article(self, url: str) -> Article | None:
        try:
            html = self.fetcher.get(url)
            if not html:
                return None
            text = extract_article_text(html)
        except Exception as exc:
            logger.error("Failed to process %s: %s", url, exc)
            return None

        if len(text) < MIN_ARTICLE_CHARS:
            logger.warning("Skipping %s: article text too short (%d chars)", url, len(text))
            return None

        return Article(id=url_to_id(url), title=text.split(".")[0][:140], url=url, content=text)

    def _process_article(self, article: Article, ids: PointIdGenerator) -> list[ChunkOutcome]:
        chunks = chunk_text(article.content, chunk_size=self.chunk_size, overlap=self.chunk_overlap)
        logger.info("%s -> %d chunks", article.title or article.url or article.id, len(chunks))

        title = clean_title(article.title)
        outcomes: list[ChunkOutcome] = []
        for start in range(0, len(chunks), self.embed_batch_size):
            batch = chunks[start : start + self.embed_batch_size]
            texts = [clean_chunk_text(c.text, 4000) for c in batch]

            try:
                vectors = self.embedder.embed_batch(texts)
            except Exception as exc:
                if not self.skip_failed_embedding_batches:
                    raise IngestionError(
                        f"Embedding batch failed for article {article.id}: {exc}",
                        details={"article_id": article.id, "batch_start": start},
                    ) from exc
                logger.error("Skipping embedding batch for article %s: %s", article.id, exc)
                outcomes.extend(
                    ChunkOutcome.skipped(article.id, c.id, f"embedding failed: {exc}") for c in batch
                )
                continue

            for chunk, text, vector in zip(batch, texts, vectors):
                if len(vector) != self.vector_size:
                    logger.warning(
                        "Skipping invalid vector for article %s (len=%d)", article.id, len(vector)
                    )
                    outcomes.append(
                        ChunkOutcome.skipped(article.id, chunk.id, f"invalid vector length {len(vector)}")
                    )
                    continue

                point = IndexPoint(
                    id=ids.next_id(),
                    vector=vector,
                    payload={
                        "article_id": article.id,
                        "title": title,
                        "url": article.url,
                        "chunk_id": chunk.id,
                        "text": text,
                    },
                )
                outcomes.append(ChunkOutcome.success(article.id, chunk.id, point))

            time.sleep(self.embed_delay)
        return outcomes
