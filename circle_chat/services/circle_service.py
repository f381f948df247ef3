"""Circle membership actions and the notifications they raise."""
from __future__ import annotations

import logging
from enum import StrEnum

from ..errors import NotFound
from ..schemas import CircleResponse
from .notification_broadcaster import NotificationBroadcaster
from .storage import CircleStorage

logger = logging.getLogger(__name__)


class NotificationType(StrEnum):
    GENERIC = "generic"
    CIRCLE_JOIN = "circle_join"


async def require_circle(storage: CircleStorage, circle_id: str) -> CircleResponse:
    circle = await storage.get_circle(circle_id)
    if circle is None:
        raise NotFound("Circle not found")
    return circle


async def join_circle(
    storage: CircleStorage,
    broadcaster: NotificationBroadcaster,
    *,
    circle_id: str,
    user_id: str,
) -> bool:
    """Add the membership and tell the circle's creator. Returns ``False`` if already a member."""

    circle = await require_circle(storage, circle_id)
    added = await storage.add_circle_member(circle.id, user_id)
    if not added:
        return False
    logger.info("User %s joined circle %s", user_id, circle.id)

    if circle.created_by != user_id:
        # Creation is a storage write; delivery is a best-effort push on top of it.
        notification = await storage.create_notification(
            circle.created_by,
            type_=NotificationType.CIRCLE_JOIN,
            title="New circle member",
            message=f"Someone new joined {circle.name}.",
            link=f"/circles/{circle.id}",
        )
        await broadcaster.broadcast(circle.created_by, notification)
    return True


async def leave_circle(storage: CircleStorage, *, circle_id: str, user_id: str) -> bool:
    circle = await require_circle(storage, circle_id)
    removed = await storage.remove_circle_member(circle.id, user_id)
    if removed:
        logger.info("User %s left circle %s", user_id, circle.id)
    return removed


__all__ = ["NotificationType", "join_circle", "leave_circle", "require_circle"]
