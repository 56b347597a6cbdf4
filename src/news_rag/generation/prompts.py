"""Prompt template for grounded, cited answers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from news_rag.retrieval.models import SearchHit

ANSWER_INSTRUCTIONS = (
    "You are a helpful assistant that answers user questions using only the "
    "information in the supplied sources. Cite sources in square brackets like "
    "[1] where the number corresponds to the source."
)


def format_sources(hits: list[SearchHit]) -> str:
    """Render hits as numbered ``SOURCE[i]: title (url)`` blocks."""
    return "\n\n".join(
        f"SOURCE[{i}]: {hit.title} ({hit.url})\n{hit.text}" for i, hit in enumerate(hits, start=1)
    )


def build_answer_prompt(hits: list[SearchHit], query: str) -> str:
    """Build the single-turn prompt sent to the LLM."""
    return (
        f"{ANSWER_INSTRUCTIONS}\n\n"
        f"{format_sources(hits)}\n\n"
        f"Question: {query}\n\n"
        "Answer concisely and include source citations."
    )
