"""Websocket relay streaming answers to the browser as they are generated.

Routes: WS /ws?sessionId=<id>

Client sends:
    {"event": "user_message", "data": {"text": "..."}}

Server sends:
    {"event": "connected", "data": {"sessionId": "..."}}
    {"event": "bot_chunk", "data": "<partial text>"}          (zero or more)
    {"event": "bot_done", "data": {"role": "bot", "content": "...", "timestamp": 0}}
    {"event": "error", "data": {"code": "...", "message": "..."}}
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from fastapi.concurrency import iterate_in_threadpool, run_in_threadpool

from news_rag.services.chat_service import ChatService
from news_rag.sessions.store import new_session_id

logger = logging.getLogger(__name__)
router = APIRouter(tags=["streaming"])


async def _send_error(websocket: WebSocket, code: str, message: str) -> None:
    await websocket.send_json({"event": "error", "data": {"code": code, "message": message}})


async def _relay_answer(websocket: WebSocket, service: ChatService, session_id: str, text: str) -> None:
    await run_in_threadpool(service.record_user, session_id, text)
    prompt, _ = await run_in_threadpool(service.prepare, text)

    parts: list[str] = []
    async for piece in iterate_in_threadpool(service.stream_answer(prompt)):
        parts.append(piece)
        await websocket.send_json({"event": "bot_chunk", "data": piece})

    message = await run_in_threadpool(service.finish, session_id, "".join(parts))
    await websocket.send_json({"event": "bot_done", "data": message.model_dump()})


@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    session_id: str | None = Query(default=None, alias="sessionId"),
) -> None:
    """Receive user messages and stream back bot answers for one session."""
    session_id = session_id or new_session_id()
    service: ChatService = websocket.app.state.chat_service

    await websocket.accept()
    logger.info("Socket connected: %s", session_id)
    await websocket.send_json({"event": "connected", "data": {"sessionId": session_id}})

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                await _send_error(websocket, "INVALID_JSON", "Invalid JSON format")
                continue

            if not isinstance(data, dict) or data.get("event") != "user_message":
                await _send_error(websocket, "UNKNOWN_EVENT", "Expected a user_message event")
                continue

            payload = data.get("data")
            text = payload.get("text") if isinstance(payload, dict) else None
            if not text:
                await _send_error(websocket, "MISSING_TEXT", "Message text is required")
                continue

            try:
                await _relay_answer(websocket, service, session_id, text)
            except WebSocketDisconnect:
                raise
            except Exception:
                logger.exception("Chat stream failed for session %s", session_id)
                await _send_error(websocket, "INTERNAL_ERROR", "Internal server error")
    except WebSocketDisconnect:
        logger.info("Socket disconnected: %s", session_id)
