"""Unit tests for the HTTP fetcher and sitemap discovery."""

from __future__ import annotations

import warnings
from unittest.mock import MagicMock

import pytest
import requests
from bs4 import XMLParsedAsHTMLWarning

from conftest import FakeFetcher
from news_rag.ingestion.fetcher import Fetcher
from news_rag.ingestion.sitemap import discover_urls, parse_sitemap


def _session(*outcomes) -> MagicMock:
    """Session whose ``get`` yields *outcomes* in order (exceptions are raised)."""
    session = MagicMock()
    session.headers = {}
    responses = []
    for outcome in outcomes:
        if isinstance(outcome, Exception):
            responses.append(outcome)
        else:
            responses.append(MagicMock(text=outcome, raise_for_status=MagicMock()))
    session.get.side_effect = responses
    return session


# ──────────────────────────────────────────────────────────────────────
# Fetcher
# ──────────────────────────────────────────────────────────────────────


class TestFetcher:
    def test_returns_body_and_sets_user_agent(self, no_sleep: list[float]) -> None:
        session = _session("<html>ok</html>")
        fetcher = Fetcher("RAG-Ingest/1.0", timeout=5, session=session)
        assert fetcher.get("https://n.example/a") == "<html>ok</html>"
        assert session.headers["User-Agent"] == "RAG-Ingest/1.0"
        assert session.get.call_args.kwargs["timeout"] == 5
        assert no_sleep == []

    def test_retries_with_constant_delay(self, no_sleep: list[float]) -> None:
        session = _session(requests.ConnectionError("reset"), requests.Timeout("slow"), "body")
        fetcher = Fetcher("ua", retries=3, retry_delay=2.0, session=session)
        assert fetcher.get("https://n.example/a") == "body"
        assert session.get.call_count == 3
        assert no_sleep == [2.0, 2.0]

    def test_gives_up_with_none(self, no_sleep: list[float], caplog: pytest.LogCaptureFixture) -> None:
        session = _session(*(requests.ConnectionError("down") for _ in range(3)))
        fetcher = Fetcher("ua", retries=3, retry_delay=0.5, session=session)
        assert fetcher.get("https://n.example/a") is None
        assert session.get.call_count == 3
        assert no_sleep == [0.5, 0.5]
        assert "Could not fetch https://n.example/a" in caplog.text

    def test_single_attempt_never_sleeps(self, no_sleep: list[float]) -> None:
        session = _session(requests.ConnectionError("down"))
        assert Fetcher("ua", retries=1, retry_delay=3.0, session=session).get("https://n.example/a") is None
        assert no_sleep == []

    def test_http_error_status_is_retried(self, no_sleep: list[float]) -> None:
        bad = MagicMock(text="nope")
        bad.raise_for_status.side_effect = requests.HTTPError("500")
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = [bad, MagicMock(text="fine", raise_for_status=MagicMock())]
        assert Fetcher("ua", session=session).get("https://n.example/a") == "fine"


# ──────────────────────────────────────────────────────────────────────
# Sitemap discovery
# ──────────────────────────────────────────────────────────────────────

INDEX = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap><loc>https://n.example/sitemap-1.xml</loc></sitemap>
  <sitemap><loc>https://n.example/sitemap-2.xml</loc></sitemap>
  <sitemap><loc>https://n.example/sitemap-3.xml</loc></sitemap>
</sitemapindex>"""


def _urlset(*locs: str) -> str:
    body = "".join(f"<url><loc>{loc}</loc><lastmod>2024-01-01</lastmod></url>" for loc in locs)
    return f'<?xml version="1.0"?><urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{body}</urlset>'


@pytest.mark.usefixtures("no_sleep")
class TestSitemap:
    def test_parse_sitemap_splits_children_and_pages(self) -> None:
        children, pages = parse_sitemap(INDEX)
        assert children[0] == "https://n.example/sitemap-1.xml"
        assert len(children) == 3
        assert pages == []

    def test_urlset_directly(self) -> None:
        fetcher = FakeFetcher({"idx": _urlset("https://n.example/1", "https://n.example/2")})
        assert discover_urls(fetcher, "idx", limit=10) == ["https://n.example/1", "https://n.example/2"]

    def test_index_is_walked_until_limit(self) -> None:
        fetcher = FakeFetcher(
            {
                "idx": INDEX,
                "https://n.example/sitemap-1.xml": _urlset("https://n.example/a", "https://n.example/b"),
                "https://n.example/sitemap-2.xml": _urlset("https://n.example/c", "https://n.example/d"),
                "https://n.example/sitemap-3.xml": _urlset("https://n.example/e"),
            }
        )
        urls = discover_urls(fetcher, "idx", limit=3)
        assert urls == ["https://n.example/a", "https://n.example/b", "https://n.example/c"]
        assert "https://n.example/sitemap-3.xml" not in fetcher.requested

    def test_failed_child_is_skipped(self) -> None:
        fetcher = FakeFetcher(
            {
                "idx": INDEX,
                "https://n.example/sitemap-2.xml": _urlset("https://n.example/c"),
            }
        )
        assert discover_urls(fetcher, "idx", limit=5) == ["https://n.example/c"]

    def test_unreachable_index_yields_nothing(self) -> None:
        assert discover_urls(FakeFetcher({}), "idx", limit=5) == []

    def test_zero_limit(self) -> None:
        fetcher = FakeFetcher({"idx": _urlset("https://n.example/1")})
        assert discover_urls(fetcher, "idx", limit=0) == []
        assert fetcher.requested == []

    def test_xml_declaration_does_not_warn(self) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("error", XMLParsedAsHTMLWarning)
            children, _ = parse_sitemap(INDEX)
            _, pages = parse_sitemap(_urlset("https://n.example/1"))
        assert len(children) == 3
        assert pages == ["https://n.example/1"]

    def test_document_without_entries_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        fetcher = FakeFetcher({"idx": "<html><body><h1>503 Service Unavailable</h1></body></html>"})
        assert discover_urls(fetcher, "idx", limit=5) == []
        assert "No <sitemap> or <url> entries in idx" in caplog.text

    def test_malformed_child_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        fetcher = FakeFetcher(
            {
                "idx": INDEX,
                "https://n.example/sitemap-1.xml": "<urlset><url><lo",
                "https://n.example/sitemap-2.xml": _urlset("https://n.example/c"),
            }
        )
        assert discover_urls(fetcher, "idx", limit=5) == ["https://n.example/c"]
        assert "No <sitemap> or <url> entries in https://n.example/sitemap-1.xml" in caplog.text
