"""Article text extraction from rendered HTML.

Best-effort: publishers use very different markup, so we try a chain of
known article-body containers, then fall back to paragraph text, then to
the whole page.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

ARTICLE_SELECTORS: tuple[str, ...] = (
    "article",
    "div.ArticleBody__content",
    "div.StandardArticleBody_body",
    "div.article-body",
    "div.story-content",
    "div[itemprop='articleBody']",
    "main",
)

MIN_ARTICLE_CHARS = 200
MIN_PARAGRAPH_CHARS = 20

_WHITESPACE = re.compile(r"\s+")


def clean_text(text: str | None) -> str:
    """Collapse every whitespace run to a single space and strip."""
    return _WHITESPACE.sub(" ", text or "").strip()


def extract_article_text(
    html: str,
    selectors: tuple[str, ...] = ARTICLE_SELECTORS,
) -> str:
    """Return the cleaned article body found in *html*.

    Parameters
    ----------
    html:
        Full page markup.
    selectors:
        CSS selectors tried in order; the first whose whitespace-normalised text is
        longer than ``MIN_ARTICLE_CHARS`` wins.

    Returns
    -------
    str
        Whitespace-normalised text; empty when the page has no text at all.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    for selector in selectors:
        text = clean_text("".join(node.get_text() for node in soup.select(selector)))
        if len(text) > MIN_ARTICLE_CHARS:
            return text

    paragraphs = [clean_text(p.get_text()) for p in soup.find_all("p")]
    paragraphs = [p for p in paragraphs if len(p) > MIN_PARAGRAPH_CHARS]
    if paragraphs:
        return clean_text("\n\n".join(paragraphs))

    body = soup.body or soup
    return clean_text(body.get_text(" "))
