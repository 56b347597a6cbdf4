"""FastAPI application exposing the RAG chatbot over REST and websocket."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from news_rag import __version__
from news_rag.config import settings
from news_rag.retrieval.models import SourceRef
from news_rag.services.chat_service import ChatService
from news_rag.sessions.models import ChatMessage

logger = logging.getLogger(__name__)


# ── Request / Response schemas ────────────────────────────────────────
class _CamelModel(BaseModel):
    model_config = {"populate_by_name": True}


class ChatRequest(_CamelModel):
    """Incoming question, optionally within an existing session."""

    session_id: str | None = Field(default=None, alias="sessionId")
    query: str = Field(min_length=1)


class ChatResponse(_CamelModel):
    """Answer plus the numbered sources it cites."""

    success: bool = True
    session_id: str = Field(alias="sessionId")
    answer: str
    sources: list[SourceRef] = []


class SessionRequest(_CamelModel):
    session_id: str = Field(alias="sessionId")


class SessionResponse(_CamelModel):
    session_id: str = Field(alias="sessionId")


class MessageRequest(BaseModel):
    text: str | None = None


# ── Dependencies ──────────────────────────────────────────────────────
def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def _answer_in_background(service: ChatService, session_id: str, text: str) -> None:
    try:
        service.answer_pending(session_id, text)
    except Exception:
        logger.exception("Background answer failed for session %s", session_id)


# ── Routes ────────────────────────────────────────────────────────────
chat_router = APIRouter(prefix="/api/chat", tags=["chat"])
session_router = APIRouter(prefix="/api/session", tags=["session"])


@chat_router.post("", response_model=ChatResponse)
def chat(body: ChatRequest, service: ChatService = Depends(get_chat_service)) -> ChatResponse:
    """Answer a question and return the cited sources."""
    result = service.ask(body.query, body.session_id)
    return ChatResponse(session_id=result.session_id, answer=result.answer, sources=result.sources)


@chat_router.get("/history", response_model=list[ChatMessage])
def chat_history(
    session_id: str = Query(alias="sessionId"),
    service: ChatService = Depends(get_chat_service),
) -> list[ChatMessage]:
    return service.history(session_id)


@chat_router.post("/reset")
def chat_reset(body: SessionRequest, service: ChatService = Depends(get_chat_service)) -> dict[str, str]:
    service.reset(body.session_id)
    return {"message": "Session cleared"}


@session_router.post("", response_model=SessionResponse)
def create_session(service: ChatService = Depends(get_chat_service)) -> SessionResponse:
    """Start a fresh, empty session."""
    return SessionResponse(session_id=service.new_session())


@session_router.get("/{session_id}/history", response_model=list[ChatMessage])
def session_history(session_id: str, service: ChatService = Depends(get_chat_service)) -> list[ChatMessage]:
    return service.history(session_id)


@session_router.delete("/{session_id}")
def delete_session(session_id: str, service: ChatService = Depends(get_chat_service)) -> dict[str, bool]:
    service.reset(session_id)
    return {"ok": True}


@session_router.post("/{session_id}/messages")
def post_message(
    session_id: str,
    body: MessageRequest,
    background: BackgroundTasks,
    service: ChatService = Depends(get_chat_service),
) -> dict[str, bool]:
    """Store a user turn now and answer it after the response is sent."""
    if not body.text:
        raise HTTPException(status_code=400, detail="No text provided")
    service.record_user(session_id, body.text)
    background.add_task(_answer_in_background, service, session_id, body.text)
    return {"ok": True}


# ── Application factory ───────────────────────────────────────────────
async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


def create_app(service: ChatService | None = None) -> FastAPI:
    """Build the API.  Without *service* one is wired from settings at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.chat_service is None:
            settings.ensure_configured("serve")
            app.state.chat_service = ChatService.from_settings(settings)
            logger.info("Chat service ready")
        yield

    from news_rag.serving.stream import router as stream_router

    app = FastAPI(
        title="News RAG Chatbot API",
        version=__version__,
        description="Retrieval-augmented chat over crawled news articles.",
        lifespan=lifespan,
    )
    app.state.chat_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, _internal_error)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "RAG Chatbot Backend Running"

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    app.include_router(chat_router)
    app.include_router(session_router)
    app.include_router(stream_router)
    return app


app = create_app()
