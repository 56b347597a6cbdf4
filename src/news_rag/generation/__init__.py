"""
Generation — prompt construction and the LLM behind the chat answers.

Public API
----------
- :func:`build_answer_prompt` — numbered-source prompt for one question.
- :class:`AnswerGenerator` — interface the chat service talks to.
- :class:`ChatModelAnswerGenerator` — LangChain chat-model implementation.
"""

from news_rag.generation.generator import AnswerGenerator, ChatModelAnswerGenerator
from news_rag.generation.prompts import build_answer_prompt

__all__ = [
    "AnswerGenerator",
    "ChatModelAnswerGenerator",
    "build_answer_prompt",
]
