"""Chat orchestration: store turn → retrieve → generate → store answer."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from pydantic import BaseModel

from news_rag.generation.prompts import build_answer_prompt
from news_rag.retrieval.models import SourceRef
from news_rag.sessions.models import ChatMessage
from news_rag.sessions.store import new_session_id

if TYPE_CHECKING:
    from news_rag.config import Settings
    from news_rag.generation.generator import AnswerGenerator
    from news_rag.retrieval.retriever import Retriever
    from news_rag.sessions.store import SessionStore

logger = logging.getLogger(__name__)


class ChatAnswer(BaseModel):
    """Answer to one question, with the sources it was grounded on."""

    session_id: str
    answer: str
    sources: list[SourceRef] = []


class ChatService:
    """Stateless orchestration over a retriever, a generator and a session store.

    Concurrent sessions share nothing but the store; turns within one
    session are appended in arrival order.

    Parameters
    ----------
    retriever:
        Query → top-k chunks.
    generator:
        Prompt → answer text.
    sessions:
        Chat history backend.
    top_k:
        Number of chunks used as context for each answer.
    """

    def __init__(
        self,
        retriever: Retriever,
        generator: AnswerGenerator,
        sessions: SessionStore,
        *,
        top_k: int = 4,
    ) -> None:
        self.retriever = retriever
        self.generator = generator
        self.sessions = sessions
        self.top_k = top_k

    @classmethod
    def from_settings(cls, settings: Settings) -> ChatService:
        """Wire the service to the configured embedding API, index, LLM and store."""
        from news_rag.generation.generator import ChatModelAnswerGenerator
        from news_rag.generation.llm import get_llm
        from news_rag.ingestion.embedder import EmbeddingClient, build_embedding_provider
        from news_rag.retrieval.chroma_store import ChromaVectorIndex
        from news_rag.retrieval.retriever import Retriever
        from news_rag.sessions.store import build_session_store

        embedder = EmbeddingClient(build_embedding_provider(settings), max_retries=settings.embed_max_retries)
        index = ChromaVectorIndex(
            settings.chroma_collection, host=settings.chroma_host, port=settings.chroma_port
        )
        return cls(
            Retriever(embedder, index, default_k=settings.retrieval_top_k),
            ChatModelAnswerGenerator(get_llm(settings)),
            build_session_store(settings),
            top_k=settings.retrieval_top_k,
        )

    # -- request/response -----------------------------------------------------

    def ask(self, query: str, session_id: str | None = None) -> ChatAnswer:
        """Answer *query* within *session_id* (a new session when omitted)."""
        session_id = session_id or new_session_id()
        self.record_user(session_id, query)

        prompt, sources = self.prepare(query)
        answer = self.generator.generate(prompt)
        self.finish(session_id, answer)
        return ChatAnswer(session_id=session_id, answer=answer, sources=sources)

    def answer_pending(self, session_id: str, text: str) -> ChatMessage:
        """Answer a user turn that was already stored (background replies)."""
        prompt, _ = self.prepare(text)
        return self.finish(session_id, self.generator.generate(prompt))

    # -- streaming building blocks --------------------------------------------

    def record_user(self, session_id: str, text: str) -> ChatMessage:
        message = ChatMessage(role="user", content=text)
        self.sessions.append(session_id, message)
        return message

    def prepare(self, query: str) -> tuple[str, list[SourceRef]]:
        """Retrieve context for *query* and build the LLM prompt."""
        hits = self.retriever.retrieve(query, k=self.top_k)
        logger.info("Retrieved %d chunks for query", len(hits))
        return build_answer_prompt(hits, query), SourceRef.from_hits(hits)

    def stream_answer(self, prompt: str) -> Iterator[str]:
        return self.generator.stream(prompt)

    def finish(self, session_id: str, content: str) -> ChatMessage:
        message = ChatMessage(role="bot", content=content)
        self.sessions.append(session_id, message)
        return message

    # -- history --------------------------------------------------------------

    def new_session(self) -> str:
        session_id = new_session_id()
        self.sessions.clear(session_id)
        return session_id

    def history(self, session_id: str) -> list[ChatMessage]:
        return self.sessions.get_messages(session_id)

    def reset(self, session_id: str) -> None:
        self.sessions.clear(session_id)
