"""Convenience exports for ORM models."""
from .associations import circle_members
from .circle import Circle
from .message import CircleMessage, MessageReaction
from .notification import Notification
from .session import UserSession
from .user import User

__all__ = [
    "circle_members",
    "Circle",
    "CircleMessage",
    "MessageReaction",
    "Notification",
    "UserSession",
    "User",
]
