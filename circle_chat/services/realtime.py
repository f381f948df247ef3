"""Process-wide wiring of the realtime chat core.

One registry per process: every socket, the fan-out engine and the
notification broadcaster share it.
"""
from __future__ import annotations

from ..config import get_settings
from .chat_fanout import ChatFanOutEngine
from .connection_registry import ConnectionRegistry
from .message_mutation import MessageMutationService
from .notification_broadcaster import NotificationBroadcaster
from .session_resolver import SessionResolver
from .storage import CircleStorage

circle_storage = CircleStorage()
session_resolver = SessionResolver(circle_storage.get_session_user, get_settings().session_cookie_name)
connection_registry = ConnectionRegistry(circle_storage.get_user_circles)
message_mutations = MessageMutationService(circle_storage)
notification_broadcaster = NotificationBroadcaster(connection_registry)
chat_fanout = ChatFanOutEngine(connection_registry, circle_storage, message_mutations)


__all__ = [
    "circle_storage",
    "session_resolver",
    "connection_registry",
    "message_mutations",
    "notification_broadcaster",
    "chat_fanout",
]
