"""Association tables shared across ORM models."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, String, Table
from sqlalchemy.sql import func

from circle_chat.database import Base


circle_members = Table(
    "circle_members",
    Base.metadata,
    Column("circle_id", String(36), ForeignKey("circles.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("joined_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


__all__ = ["circle_members"]
