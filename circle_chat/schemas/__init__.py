"""Pydantic schemas shared by routers and services."""
from .frames import (
    ChatDelivery,
    ChatFrame,
    CirclesRefreshed,
    ErrorFrame,
    NotificationPush,
    OutboundFrame,
    RefreshCirclesFrame,
    encode_frame,
    parse_inbound_frame,
)
from .messages import (
    CircleListResponse,
    CircleMessageResponse,
    CircleResponse,
    MessageCreateRequest,
    MessageEditRequest,
    MessageMutationResponse,
    ReactionCreateRequest,
    ReactionResponse,
    ReactionSummary,
    SuccessResponse,
)
from .notifications import NotificationResponse

__all__ = [
    "ChatDelivery",
    "ChatFrame",
    "CirclesRefreshed",
    "ErrorFrame",
    "NotificationPush",
    "OutboundFrame",
    "RefreshCirclesFrame",
    "encode_frame",
    "parse_inbound_frame",
    "CircleListResponse",
    "CircleMessageResponse",
    "CircleResponse",
    "MessageCreateRequest",
    "MessageEditRequest",
    "MessageMutationResponse",
    "ReactionCreateRequest",
    "ReactionResponse",
    "ReactionSummary",
    "SuccessResponse",
    "NotificationResponse",
]
