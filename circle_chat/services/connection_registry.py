"""Registry of live, authenticated chat sockets and their membership caches.

Every admitted connection owns an outbox drained by a single writer task, so
frames reach one socket in the order they were queued while a slow or stalled
socket never holds up anyone else.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Protocol, Union

from starlette.websockets import WebSocketState

from ..schemas import OutboundFrame, encode_frame

logger = logging.getLogger(__name__)

DEFAULT_OUTBOX_LIMIT = 256


class SocketLike(Protocol):
    client_state: WebSocketState
    application_state: WebSocketState

    async def accept(self) -> None: ...

    async def send_text(self, data: str) -> None: ...


MembershipLookup = Callable[[str], Awaitable[list[str]]]
# A queued job resolves to the text to send, or ``None`` to skip the send.
OutboundJob = Callable[[], Awaitable[Union[str, None]]]
OutboundItem = Union[str, OutboundJob]
FailureCallback = Callable[["ChatConnection"], Awaitable[None]]


@dataclass(eq=False)
class ChatConnection:
    """One admitted socket, tagged with its user and a point-in-time membership snapshot."""

    websocket: SocketLike
    user_id: str
    circle_ids: frozenset[str] = field(default_factory=frozenset)
    outbox_limit: int = DEFAULT_OUTBOX_LIMIT
    refresh_generation: int = field(default=0, repr=False)
    _outbox: asyncio.Queue[OutboundItem] = field(init=False, repr=False)
    _writer: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self._outbox = asyncio.Queue(maxsize=self.outbox_limit)

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def in_circle(self, circle_id: str) -> bool:
        return circle_id in self.circle_ids

    def start(self, on_failure: FailureCallback) -> None:
        if self._writer is None:
            self._writer = asyncio.create_task(self._write_loop(on_failure))

    def enqueue(self, item: OutboundItem) -> bool:
        """Queue a payload (or a job producing one). Returns ``False`` once the connection is closed."""

        if self._closed:
            return False
        try:
            self._outbox.put_nowait(item)
        except asyncio.QueueFull:
            logger.warning("Outbox full for user %s; closing chat connection", self.user_id)
            self.close()
            return False
        return True

    def send(self, frame: OutboundFrame) -> bool:
        return self.enqueue(encode_frame(frame))

    async def flush(self) -> None:
        """Wait until everything queued so far has been sent or discarded."""

        await self._outbox.join()

    def close(self) -> None:
        self._closed = True
        writer = self._writer
        if writer is not None and writer is not asyncio.current_task():
            writer.cancel()
        self._discard_pending()

    async def _write_loop(self, on_failure: FailureCallback) -> None:
        while not self._closed:
            item = await self._outbox.get()
            try:
                payload = await self._resolve(item)
                if payload is not None and self.is_open:
                    await self.websocket.send_text(payload)
            except Exception:
                logger.info("Dropping chat socket for user %s after failed send", self.user_id)
                self._closed = True
                await on_failure(self)
            finally:
                self._outbox.task_done()
        self._discard_pending()

    async def _resolve(self, item: OutboundItem) -> str | None:
        if isinstance(item, str):
            return item
        try:
            return await item()
        except Exception:
            logger.warning("Outbound job failed for user %s", self.user_id, exc_info=True)
            return None

    def _discard_pending(self) -> None:
        while True:
            try:
                self._outbox.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._outbox.task_done()


class ConnectionRegistry:
    """Tracks admitted connections; the raw collection is never handed out."""

    def __init__(self, membership_lookup: MembershipLookup, *, outbox_limit: int = DEFAULT_OUTBOX_LIMIT) -> None:
        self._membership_lookup = membership_lookup
        self._outbox_limit = outbox_limit
        self._connections: set[ChatConnection] = set()
        self._lock = asyncio.Lock()

    async def admit(self, websocket: SocketLike, user_id: str) -> ChatConnection:
        """Accept the socket, prime its membership cache, start its writer and register it."""

        await websocket.accept()
        connection = ChatConnection(websocket=websocket, user_id=user_id, outbox_limit=self._outbox_limit)
        try:
            connection.circle_ids = frozenset(await self._membership_lookup(user_id))
        except Exception:
            # An empty cache heals on the next refresh.
            logger.warning("Failed to prime circle memberships for user %s", user_id, exc_info=True)
            connection.circle_ids = frozenset()
        connection.start(self.remove)
        async with self._lock:
            self._connections.add(connection)
        logger.info("Chat socket admitted for user %s (%d circles)", user_id, len(connection.circle_ids))
        return connection

    async def remove(self, connection: ChatConnection) -> None:
        async with self._lock:
            self._connections.discard(connection)
        connection.close()

    async def refresh_membership(self, connection: ChatConnection) -> frozenset[str]:
        """Re-read the connection's circle ids from storage.

        Only the most recently started refresh updates the cache, so an older
        read that finishes late never overwrites a newer one.
        """

        connection.refresh_generation += 1
        generation = connection.refresh_generation
        circle_ids = frozenset(await self._membership_lookup(connection.user_id))
        if generation == connection.refresh_generation:
            connection.circle_ids = circle_ids
        return circle_ids

    async def matching(self, predicate: Callable[[ChatConnection], bool]) -> list[ChatConnection]:
        """Snapshot the open connections accepted by ``predicate``."""

        async with self._lock:
            targets = list(self._connections)
        return [connection for connection in targets if connection.is_open and predicate(connection)]

    async def for_user(self, user_id: str) -> list[ChatConnection]:
        return await self.matching(lambda connection: connection.user_id == user_id)

    async def flush(self) -> None:
        """Wait for every registered connection's outbox to empty."""

        async with self._lock:
            targets = list(self._connections)
        await asyncio.gather(*(connection.flush() for connection in targets))

    def __len__(self) -> int:
        return len(self._connections)


__all__ = [
    "ChatConnection",
    "ConnectionRegistry",
    "DEFAULT_OUTBOX_LIMIT",
    "MembershipLookup",
    "OutboundItem",
    "OutboundJob",
    "SocketLike",
]
