"""Schemas for notifications."""
from __future__ import annotations

from datetime import datetime

from .base import CamelModel


class NotificationResponse(CamelModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    link: str | None = None
    read: bool = False
    read_at: datetime | None = None
    created_at: datetime


__all__ = ["NotificationResponse"]
