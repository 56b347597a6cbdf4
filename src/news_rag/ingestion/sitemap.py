"""Sitemap discovery: turn a sitemap index into a list of article URLs."""

from __future__ import annotations

import logging
import time
import warnings
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

if TYPE_CHECKING:
    from news_rag.ingestion.fetcher import Fetcher

logger = logging.getLogger(__name__)


def _locs(soup: BeautifulSoup, parent: str) -> list[str]:
    """Return the ``<loc>`` text of every *parent* element, in document order."""
    locs: list[str] = []
    for node in soup.find_all(parent):
        loc = node.find("loc")
        if loc is not None and loc.get_text(strip=True):
            locs.append(loc.get_text(strip=True))
    return locs


def parse_sitemap(xml: str) -> tuple[list[str], list[str]]:
    """Split a sitemap document into ``(child_sitemaps, page_urls)``.

    A ``<sitemapindex>`` contributes child sitemaps, a ``<urlset>``
    contributes page URLs.  Anything else (malformed XML, an HTML error
    page) yields two empty lists.
    """
    # html.parser is lenient and handles sitemap tags fine; it only warns.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(xml, "html.parser")
    return _locs(soup, "sitemap"), _locs(soup, "url")


def _parse_logged(url: str, body: str) -> tuple[list[str], list[str]]:
    children, pages = parse_sitemap(body)
    if not children and not pages:
        logger.warning("No <sitemap> or <url> entries in %s", url)
    return children, pages


def discover_urls(
    fetcher: Fetcher,
    sitemap_index: str,
    limit: int,
    *,
    delay: float = 0.15,
) -> list[str]:
    """Collect up to *limit* article URLs starting from *sitemap_index*.

    Child sitemaps are visited in order, one at a time, with *delay*
    seconds between them; a child that cannot be fetched or holds no
    entries is skipped.
    """
    logger.info("Fetching sitemap: %s", sitemap_index)
    urls: list[str] = []
    if limit <= 0:
        return urls

    body = fetcher.get(sitemap_index)
    if body is None:
        return urls

    children, pages = _parse_logged(sitemap_index, body)
    for child in children:
        if len(urls) >= limit:
            break
        child_body = fetcher.get(child)
        if child_body is None:
            continue
        _, child_pages = _parse_logged(child, child_body)
        urls.extend(child_pages[: limit - len(urls)])
        time.sleep(delay)
    urls.extend(pages[: max(0, limit - len(urls))])

    logger.info("Found %d URLs", len(urls))
    return urls[:limit]
