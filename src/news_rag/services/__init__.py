"""
Services — application-level orchestration used by the HTTP layer.
"""

from news_rag.services.chat_service import ChatAnswer, ChatService

__all__ = ["ChatAnswer", "ChatService"]
