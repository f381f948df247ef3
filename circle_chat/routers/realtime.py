"""WebSocket endpoint for circle chat and live notifications."""
from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, status

from ..services import chat_fanout, connection_registry, session_resolver
from ..services.chat_fanout import INVALID_FRAME

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def circle_chat_socket(websocket: WebSocket) -> None:
    """Authenticate from the session cookie, then process frames until the client leaves."""

    user_id = await session_resolver.resolve(websocket.headers.get("cookie"))
    if user_id is None:
        # The close code is only visible to the client after an accept.
        await websocket.accept()
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Authentication required")
        logger.info("Rejected unauthenticated chat socket from %s", websocket.client)
        return

    connection = await connection_registry.admit(websocket, user_id)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                # Binary frames are not part of the protocol.
                chat_fanout.reply_error(connection, INVALID_FRAME)
                continue
            await chat_fanout.handle_frame(connection, raw)
    finally:
        await connection_registry.remove(connection)
        logger.info("Chat socket closed for user %s", user_id)


__all__ = ["router"]
