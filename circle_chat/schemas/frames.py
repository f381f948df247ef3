"""Typed WebSocket frames exchanged on the circle chat socket.

Inbound frames are a tagged union on ``type``; :func:`parse_inbound_frame`
rejects tags it does not know with :class:`UnknownFrameType` instead of
dropping them. Outbound frames serialise to the camelCase JSON the client
expects.
"""
from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from ..errors import UnknownFrameType
from .base import CamelModel
from .messages import CircleMessageResponse
from .notifications import NotificationResponse


class ChatFrame(CamelModel):
    type: Literal["chat"]
    circle_id: str = Field(..., min_length=1)
    content: str = Field(..., max_length=4000)


class RefreshCirclesFrame(CamelModel):
    type: Literal["refresh_circles"]


InboundFrame = Annotated[Union[ChatFrame, RefreshCirclesFrame], Field(discriminator="type")]

_inbound_adapter: TypeAdapter[ChatFrame | RefreshCirclesFrame] = TypeAdapter(InboundFrame)
_INBOUND_TYPES = frozenset({"chat", "refresh_circles"})


def parse_inbound_frame(raw: str) -> ChatFrame | RefreshCirclesFrame:
    """Decode a raw text frame.

    Raises ``ValueError`` for malformed JSON, ``UnknownFrameType`` for an
    unrecognised tag and ``pydantic.ValidationError`` for a known tag with a bad
    body.
    """

    payload: Any = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("Frame must be a JSON object")
    frame_type = payload.get("type")
    if frame_type not in _INBOUND_TYPES:
        raise UnknownFrameType(frame_type)
    return _inbound_adapter.validate_python(payload)


class ChatDelivery(CamelModel):
    type: Literal["chat"] = "chat"
    message: CircleMessageResponse


class CirclesRefreshed(CamelModel):
    type: Literal["circles_refreshed"] = "circles_refreshed"


class ErrorFrame(CamelModel):
    type: Literal["error"] = "error"
    error: str


class NotificationPush(CamelModel):
    type: Literal["notification"] = "notification"
    data: NotificationResponse


OutboundFrame = Union[ChatDelivery, CirclesRefreshed, ErrorFrame, NotificationPush]


def encode_frame(frame: OutboundFrame) -> str:
    return frame.model_dump_json(by_alias=True)


__all__ = [
    "ChatFrame",
    "RefreshCirclesFrame",
    "InboundFrame",
    "parse_inbound_frame",
    "ChatDelivery",
    "CirclesRefreshed",
    "ErrorFrame",
    "NotificationPush",
    "OutboundFrame",
    "encode_frame",
]
