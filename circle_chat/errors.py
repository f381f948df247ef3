"""Domain errors raised by the chat services.

Each error carries the HTTP status the REST layer maps it to and a detail
string that is safe to show to the caller.
"""
from __future__ import annotations

from typing import Any


class ChatError(Exception):
    status_code: int = 400
    default_detail: str = "Request failed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotAuthorized(ChatError):
    """The caller is not the author of the message being mutated."""

    status_code = 403
    default_detail = "You can only modify your own messages"


class NotACircleMember(ChatError):
    status_code = 403
    default_detail = "Not a member of this circle"


class EmptyContent(ChatError):
    status_code = 400
    default_detail = "Message content is required"


class MissingEmoji(ChatError):
    status_code = 400
    default_detail = "Emoji is required"


class NotFound(ChatError):
    status_code = 404
    default_detail = "Not found"


class UnknownFrameType(ChatError):
    """An inbound WebSocket frame carried a ``type`` this server does not handle."""

    def __init__(self, frame_type: Any) -> None:
        self.frame_type = frame_type
        super().__init__(f"Unknown frame type: {frame_type}")


__all__ = [
    "ChatError",
    "NotAuthorized",
    "NotACircleMember",
    "EmptyContent",
    "MissingEmoji",
    "NotFound",
    "UnknownFrameType",
]
