"""Session stores: an append-only message list per session id."""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from news_rag.sessions.models import ChatMessage

if TYPE_CHECKING:
    from news_rag.config import Settings

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return str(uuid.uuid4())


class SessionStore(ABC):
    """Append-only chat history keyed by session id."""

    @abstractmethod
    def append(self, session_id: str, message: ChatMessage) -> None:
        """Append *message* to the session and refresh its expiry."""
        ...

    @abstractmethod
    def get_messages(self, session_id: str) -> list[ChatMessage]:
        """Return the whole history, oldest first (empty for unknown ids)."""
        ...

    @abstractmethod
    def clear(self, session_id: str) -> None:
        """Delete the session's history."""
        ...


class RedisSessionStore(SessionStore):
    """Redis list per session, each element a JSON-encoded :class:`ChatMessage`.

    Parameters
    ----------
    client:
        A ``redis.Redis`` client created with ``decode_responses=True``.
    ttl_seconds:
        Expiry applied to the list on every append; ``0`` disables expiry.
    key_prefix:
        Prepended to the session id to build the Redis key.
    """

    def __init__(self, client: Any, *, ttl_seconds: int = 86400, key_prefix: str = "") -> None:
        self._client = client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> RedisSessionStore:
        import redis

        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    def append(self, session_id: str, message: ChatMessage) -> None:
        key = self._key(session_id)
        self._client.rpush(key, message.model_dump_json())
        if self.ttl_seconds > 0:
            self._client.expire(key, self.ttl_seconds)

    def get_messages(self, session_id: str) -> list[ChatMessage]:
        messages: list[ChatMessage] = []
        for raw in self._client.lrange(self._key(session_id), 0, -1):
            try:
                messages.append(ChatMessage.model_validate_json(raw))
            except ValidationError:
                logger.warning("Dropping malformed message in session %s", session_id)
        return messages

    def clear(self, session_id: str) -> None:
        self._client.delete(self._key(session_id))

    def ping(self) -> bool:
        return bool(self._client.ping())


class InMemorySessionStore(SessionStore):
    """Process-local store for development and tests; no expiry."""

    def __init__(self) -> None:
        self._sessions: dict[str, list[ChatMessage]] = {}
        self._lock = threading.Lock()

    def append(self, session_id: str, message: ChatMessage) -> None:
        with self._lock:
            self._sessions.setdefault(session_id, []).append(message)

    def get_messages(self, session_id: str) -> list[ChatMessage]:
        with self._lock:
            return list(self._sessions.get(session_id, []))

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)


def build_session_store(settings: Settings) -> SessionStore:
    """Return the store selected by ``settings.session_backend``."""
    backend = settings.session_backend.lower()
    if backend == "redis":
        return RedisSessionStore.from_url(settings.redis_url, ttl_seconds=settings.session_ttl_seconds)
    if backend == "memory":
        return InMemorySessionStore()
    raise ValueError(
        f"Unsupported session_backend={settings.session_backend!r}. Choose from: redis, memory."
    )
