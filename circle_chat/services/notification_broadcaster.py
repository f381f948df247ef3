"""Push freshly stored notifications to every live socket of their recipient."""
from __future__ import annotations

import logging

from ..schemas import NotificationPush, NotificationResponse, encode_frame
from .connection_registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class NotificationBroadcaster:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    async def broadcast(self, user_id: str, notification: NotificationResponse) -> int:
        """Queue the push on the user's open sockets; returns how many accepted it.

        With no open sockets this is a no-op; the notification stays stored for polling.
        Sockets whose send later fails are dropped by their own writer.
        """

        targets = await self._registry.for_user(user_id)
        if not targets:
            return 0
        payload = encode_frame(NotificationPush(data=notification))
        queued = sum(connection.enqueue(payload) for connection in targets)
        logger.debug("Notification %s queued on %d socket(s) for %s", notification.id, queued, user_id)
        return queued


__all__ = ["NotificationBroadcaster"]
