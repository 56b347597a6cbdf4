"""LLM initialisation — single place to swap providers.

Supports any endpoint speaking the OpenAI chat-completions protocol:

1. **OpenAI cloud** (default) — set ``OPENAI_API_KEY``.
2. **Any compatible endpoint** — set ``LLM_BASE_URL`` (Gemini's
   OpenAI-compatible API, a local vLLM or Ollama server, …) together with
   the matching ``LLM_MODEL_NAME`` and key.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from langchain_openai import ChatOpenAI

if TYPE_CHECKING:
    from news_rag.config import Settings

logger = logging.getLogger(__name__)


def get_llm(settings: Settings, temperature: float | None = None) -> ChatOpenAI:
    """Return the configured chat model.

    A dummy API key (``"EMPTY"``) is used for self-hosted endpoints that do
    not require authentication, because LangChain requires a non-empty value.
    """
    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": settings.llm_temperature if temperature is None else temperature,
    }

    if settings.llm_base_url:
        logger.info("Using LLM endpoint: %s", settings.llm_base_url)
        kwargs["base_url"] = settings.llm_base_url
        kwargs["api_key"] = settings.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = settings.openai_api_key

    return ChatOpenAI(**kwargs)
