"""
Sessions — per-session chat history in a key-value store.
"""

from news_rag.sessions.models import ChatMessage
from news_rag.sessions.store import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
    build_session_store,
    new_session_id,
)

__all__ = [
    "ChatMessage",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "build_session_store",
    "new_session_id",
]
