"""Unit tests for the chat orchestration service."""

from __future__ import annotations

import pytest

from conftest import FakeAnswerGenerator, FakeVectorIndex
from news_rag.generation.prompts import build_answer_prompt
from news_rag.ingestion.embedder import EmbeddingClient
from news_rag.retrieval.retriever import Retriever
from news_rag.services.chat_service import ChatService
from news_rag.sessions.store import InMemorySessionStore


@pytest.fixture()
def generator() -> FakeAnswerGenerator:
    return FakeAnswerGenerator(pieces=["Markets ", "rallied [1]."])


@pytest.fixture()
def service(embedder: EmbeddingClient, index: FakeVectorIndex, generator: FakeAnswerGenerator) -> ChatService:
    return ChatService(Retriever(embedder, index), generator, InMemorySessionStore(), top_k=2)


class TestAsk:
    def test_ask_stores_both_turns_and_cites_sources(
        self, service: ChatService, generator: FakeAnswerGenerator, index: FakeVectorIndex
    ) -> None:
        result = service.ask("What moved markets?", "s1")

        assert result.session_id == "s1"
        assert result.answer == "Markets rallied [1]."
        assert [(s.id, s.title) for s in result.sources] == [(1, "Markets"), (2, "Energy")]
        assert generator.prompts == [build_answer_prompt(index.hits, "What moved markets?")]
        assert index.searches[0][1] == 2

        history = service.history("s1")
        assert [(m.role, m.content) for m in history] == [
            ("user", "What moved markets?"),
            ("bot", "Markets rallied [1]."),
        ]

    def test_ask_without_session_creates_one(self, service: ChatService) -> None:
        result = service.ask("hello")
        assert result.session_id
        assert len(service.history(result.session_id)) == 2

    def test_ask_with_no_hits_still_answers(self, embedder: EmbeddingClient, generator: FakeAnswerGenerator) -> None:
        service = ChatService(Retriever(embedder, FakeVectorIndex()), generator, InMemorySessionStore())
        result = service.ask("anything?", "s")
        assert result.sources == []
        assert "Question: anything?" in generator.prompts[0]

    def test_answer_pending_only_adds_the_bot_turn(self, service: ChatService) -> None:
        service.record_user("s2", "oil?")
        message = service.answer_pending("s2", "oil?")
        assert message.role == "bot"
        assert [m.role for m in service.history("s2")] == ["user", "bot"]


class TestStreamingBlocks:
    def test_stream_then_finish(self, service: ChatService) -> None:
        service.record_user("s3", "What moved markets?")
        prompt, sources = service.prepare("What moved markets?")
        pieces = list(service.stream_answer(prompt))
        message = service.finish("s3", "".join(pieces))

        assert pieces == ["Markets ", "rallied [1]."]
        assert len(sources) == 2
        assert message.content == "Markets rallied [1]."
        assert service.history("s3")[-1] == message


class TestSessions:
    def test_new_session_is_empty_and_unique(self, service: ChatService) -> None:
        first, second = service.new_session(), service.new_session()
        assert first != second
        assert service.history(first) == []

    def test_reset_clears_history(self, service: ChatService) -> None:
        service.ask("hi", "s1")
        service.ask("again", "s1")
        assert len(service.history("s1")) == 4
        service.reset("s1")
        assert service.history("s1") == []
