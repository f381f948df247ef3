"""Schemas used by circle messaging endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import Field

from .base import CamelModel


class CircleMessageResponse(CamelModel):
    id: str
    circle_id: str
    author_id: str
    content: str
    created_at: datetime
    edited: bool = False
    edited_at: datetime | None = None
    deleted: bool = False
    deleted_at: datetime | None = None


class MessageCreateRequest(CamelModel):
    content: str = Field("", max_length=4000)


class MessageEditRequest(CamelModel):
    content: str = Field("", max_length=4000)


class MessageMutationResponse(CamelModel):
    success: bool = True
    message: CircleMessageResponse


class ReactionCreateRequest(CamelModel):
    emoji: str = ""


class ReactionResponse(CamelModel):
    id: str
    message_id: str
    user_id: str
    emoji: str
    created_at: datetime


class ReactionSummary(CamelModel):
    user_id: str
    emoji: str


class SuccessResponse(CamelModel):
    success: bool = True


class CircleResponse(CamelModel):
    id: str
    name: str
    description: str | None = None
    created_by: str
    created_at: datetime


class CircleListResponse(CamelModel):
    items: List[CircleResponse]


__all__ = [
    "CircleMessageResponse",
    "MessageCreateRequest",
    "MessageEditRequest",
    "MessageMutationResponse",
    "ReactionCreateRequest",
    "ReactionResponse",
    "ReactionSummary",
    "SuccessResponse",
    "CircleResponse",
    "CircleListResponse",
]
