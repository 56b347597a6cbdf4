"""Batched, failure-tolerant writes to the vector index."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from news_rag.ingestion.models import IndexPoint, UpsertReport

if TYPE_CHECKING:
    from news_rag.retrieval.base import VectorIndex

logger = logging.getLogger(__name__)


def sanitize_payload(value: Any) -> Any:
    """Recursively drop ``None`` values from dicts and lists.

    The vector store rejects nulls in payloads; scalars pass through as-is.
    """
    if isinstance(value, dict):
        return {k: sanitize_payload(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [sanitize_payload(v) for v in value if v is not None]
    return value


class Upserter:
    """Write :class:`IndexPoint` batches to a :class:`VectorIndex`.

    Each batch is acknowledged before the next one is sent.  A failing
    batch is logged and skipped; re-running ingestion recovers it.
    """

    def __init__(self, index: VectorIndex, *, batch_size: int = 128, delay: float = 0.1) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.index = index
        self.batch_size = batch_size
        self.delay = delay

    def upsert(self, points: list[IndexPoint]) -> UpsertReport:
        report = UpsertReport()
        for start in range(0, len(points), self.batch_size):
            batch_no = start // self.batch_size + 1
            batch = [
                IndexPoint(id=p.id, vector=p.vector, payload=sanitize_payload(p.payload))
                for p in points[start : start + self.batch_size]
            ]
            if not batch:
                continue

            try:
                logger.info("Upserting batch %d (%d points)", batch_no, len(batch))
                self.index.upsert(batch)
                report.batches_written += 1
                report.points_written += len(batch)
            except Exception as exc:
                logger.error("Failed to upsert batch %d: %s", batch_no, exc)
                body = _response_body(exc)
                if body:
                    logger.error("Response data: %s", body)
                report.batches_failed += 1
                report.points_failed += len(batch)

            time.sleep(self.delay)
        return report


def _response_body(exc: Exception) -> str:
    """Best-effort extraction of a remote error payload from *exc*."""
    response = getattr(exc, "response", None)
    if response is None:
        return ""
    text = getattr(response, "text", "")
    return text[:500] if isinstance(text, str) else ""
