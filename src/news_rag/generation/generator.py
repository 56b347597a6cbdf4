"""Answer generators — turn a prompt into text, in one piece or streamed."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

from langchain_core.messages import HumanMessage

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "Sorry, something went wrong contacting the LLM."
EMPTY_ANSWER = "Sorry, I couldn't generate an answer."


class AnswerGenerator(ABC):
    """Narrow interface over the hosted LLM."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return the full answer for *prompt*."""
        ...

    def stream(self, prompt: str) -> Iterator[str]:
        """Yield the answer in pieces.  Default: one piece from :meth:`generate`."""
        yield self.generate(prompt)


def _content_text(content: Any) -> str:
    """Flatten LangChain message content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part if isinstance(part, str) else str(part.get("text", ""))
            for part in content
            if isinstance(part, (str, dict))
        )
    return ""


class ChatModelAnswerGenerator(AnswerGenerator):
    """Generator backed by a LangChain chat model.

    Upstream failures never reach the user: they are logged and replaced
    by :data:`FALLBACK_ANSWER`.

    Parameters
    ----------
    llm:
        Any LangChain ``BaseChatModel`` (see :func:`news_rag.generation.llm.get_llm`).
    """

    def __init__(self, llm: Any) -> None:
        self._llm = llm

    def generate(self, prompt: str) -> str:
        try:
            response = self._llm.invoke([HumanMessage(content=prompt)])
        except Exception as exc:
            logger.error("LLM API error: %s", exc)
            return FALLBACK_ANSWER
        return _content_text(response.content).strip() or EMPTY_ANSWER

    def stream(self, prompt: str) -> Iterator[str]:
        produced = False
        try:
            for chunk in self._llm.stream([HumanMessage(content=prompt)]):
                text = _content_text(chunk.content)
                if text:
                    produced = True
                    yield text
        except Exception as exc:
            logger.error("LLM API error while streaming: %s", exc)
            yield ("\n\n" if produced else "") + FALLBACK_ANSWER
            return
        if not produced:
            yield EMPTY_ANSWER
