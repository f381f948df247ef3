"""Inbound chat frame handling and per-circle fan-out.

The sender's membership is checked against storage at write time. Recipients
are picked from their cached membership; each delivery is queued on the
recipient's own outbox as a job that re-verifies membership just before the
send. A recipient that has left the circle is skipped and its cache is rebuilt
in the background.

Persisting a message and queueing its deliveries happen under a per-circle
lock, so every recipient sees a circle's messages in the order they were
stored. The lock is never held across socket writes, and different circles do
not wait on each other.
"""
from __future__ import annotations

import asyncio
import logging
import weakref

from ..errors import EmptyContent, NotACircleMember, UnknownFrameType
from ..schemas import (
    ChatDelivery,
    ChatFrame,
    CircleMessageResponse,
    CirclesRefreshed,
    ErrorFrame,
    RefreshCirclesFrame,
    encode_frame,
    parse_inbound_frame,
)
from .connection_registry import ChatConnection, ConnectionRegistry, OutboundJob
from .message_mutation import MessageMutationService
from .storage import CircleStorage

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"
INVALID_FRAME = "Invalid frame"


class ChatFanOutEngine:
    def __init__(
        self,
        registry: ConnectionRegistry,
        storage: CircleStorage,
        mutations: MessageMutationService,
    ) -> None:
        self._registry = registry
        self._storage = storage
        self._mutations = mutations
        # Entries disappear once no publisher holds or waits on the lock.
        self._circle_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._background: set[asyncio.Task[None]] = set()

    async def handle_frame(self, connection: ChatConnection, raw: str) -> None:
        """Process one inbound text frame. Errors are reported to the sender only."""

        try:
            frame = parse_inbound_frame(raw)
        except UnknownFrameType as exc:
            self.reply_error(connection, exc.detail)
            return
        except ValueError:
            # Covers malformed JSON and pydantic validation failures.
            self.reply_error(connection, INVALID_FRAME)
            return

        try:
            if isinstance(frame, ChatFrame):
                await self._handle_chat(connection, frame)
            elif isinstance(frame, RefreshCirclesFrame):
                await self._handle_refresh(connection)
            else:  # pragma: no cover - parse_inbound_frame only yields the types above
                raise UnknownFrameType(getattr(frame, "type", None))
        except Exception:
            logger.exception("Failed to process %s frame from user %s", frame.type, connection.user_id)
            self.reply_error(connection, INTERNAL_ERROR)

    async def _handle_chat(self, connection: ChatConnection, frame: ChatFrame) -> None:
        if not frame.content.strip():
            self.reply_error(connection, EmptyContent.default_detail)
            return

        if not await self._storage.is_circle_member(frame.circle_id, connection.user_id):
            await self._refresh_quietly(connection)
            self.reply_error(connection, NotACircleMember.default_detail)
            return

        if not connection.in_circle(frame.circle_id):
            # Sender joined after its cache was primed; include it in its own fan-out.
            await self._refresh_quietly(connection)

        await self.publish(frame.circle_id, connection.user_id, frame.content)

    async def _handle_refresh(self, connection: ChatConnection) -> None:
        await self._registry.refresh_membership(connection)
        connection.send(CirclesRefreshed())

    def _circle_lock(self, circle_id: str) -> asyncio.Lock:
        lock = self._circle_locks.get(circle_id)
        if lock is None:
            lock = asyncio.Lock()
            self._circle_locks[circle_id] = lock
        return lock

    async def publish(self, circle_id: str, user_id: str, content: str) -> CircleMessageResponse:
        """Persist a message from a verified member and queue it for the circle."""

        async with self._circle_lock(circle_id):
            message = await self._mutations.create(circle_id, user_id, content)
            await self.broadcast_message(message)
        return message

    async def broadcast_message(self, message: CircleMessageResponse) -> int:
        """Queue ``message`` on every connection whose cache lists its circle."""

        circle_id = message.circle_id
        targets = await self._registry.matching(lambda connection: connection.in_circle(circle_id))
        if not targets:
            return 0
        payload = encode_frame(ChatDelivery(message=message))
        return sum(connection.enqueue(self._delivery(connection, circle_id, payload)) for connection in targets)

    def _delivery(self, connection: ChatConnection, circle_id: str, payload: str) -> OutboundJob:
        async def _verified_payload() -> str | None:
            try:
                still_member = await self._storage.is_circle_member(circle_id, connection.user_id)
            except Exception:
                logger.warning(
                    "Membership re-check failed for user %s in circle %s",
                    connection.user_id,
                    circle_id,
                    exc_info=True,
                )
                return None
            if not still_member:
                self._schedule_refresh(connection)
                return None
            return payload

        return _verified_payload

    def _schedule_refresh(self, connection: ChatConnection) -> None:
        task = asyncio.create_task(self._refresh_quietly(connection))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _refresh_quietly(self, connection: ChatConnection) -> None:
        try:
            await self._registry.refresh_membership(connection)
        except Exception:
            logger.warning("Membership refresh failed for user %s", connection.user_id, exc_info=True)

    async def drain(self) -> None:
        """Wait for pending background cache refreshes."""

        while self._background:
            await asyncio.gather(*list(self._background))

    def reply_error(self, connection: ChatConnection, error: str) -> None:
        if not connection.send(ErrorFrame(error=error)):
            logger.debug("Could not report error to user %s", connection.user_id)


__all__ = ["ChatFanOutEngine", "INTERNAL_ERROR", "INVALID_FRAME"]
