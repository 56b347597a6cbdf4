"""Exception hierarchy for news-rag.

Transient network failures are retried where they happen and never show
up here; these types cover the failures that end a run or a process.
"""

from __future__ import annotations

from typing import Any


class NewsRagError(Exception):
    """Base exception for all news-rag errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(NewsRagError):
    """Raised at process start when required settings are missing."""


class IngestionError(NewsRagError):
    """Raised when an ingestion run cannot continue.

    Covers a sitemap that yields no URLs, an unreadable input file, and an
    embedding batch that still fails after all retries.
    """
