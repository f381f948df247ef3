"""Convenience exports for service layer."""
from .auth_service import get_current_user_id
from .chat_fanout import ChatFanOutEngine
from .circle_service import NotificationType, join_circle, leave_circle, require_circle
from .connection_registry import ChatConnection, ConnectionRegistry
from .message_mutation import MessageMutationService
from .notification_broadcaster import NotificationBroadcaster
from .realtime import (
    chat_fanout,
    circle_storage,
    connection_registry,
    message_mutations,
    notification_broadcaster,
    session_resolver,
)
from .session_resolver import SessionResolver, extract_session_id
from .storage import CircleStorage

__all__ = [
    "get_current_user_id",
    "ChatFanOutEngine",
    "NotificationType",
    "join_circle",
    "leave_circle",
    "require_circle",
    "ChatConnection",
    "ConnectionRegistry",
    "MessageMutationService",
    "NotificationBroadcaster",
    "chat_fanout",
    "circle_storage",
    "connection_registry",
    "message_mutations",
    "notification_broadcaster",
    "session_resolver",
    "SessionResolver",
    "extract_session_id",
    "CircleStorage",
]
