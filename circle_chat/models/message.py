"""SQLAlchemy ORM models for circle messages and their reactions."""
from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression, func

from circle_chat.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class CircleMessage(Base):
    __tablename__ = "circle_messages"

    id = Column(String(36), primary_key=True, default=_new_id)
    circle_id = Column(String(36), ForeignKey("circles.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    edited = Column(Boolean, nullable=False, server_default=expression.false(), default=False)
    edited_at = Column(DateTime(timezone=True), nullable=True)
    deleted = Column(Boolean, nullable=False, server_default=expression.false(), default=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    circle = relationship("Circle", back_populates="messages")
    author = relationship("User")
    # Soft-deleted messages keep their reactions addressable.
    reactions = relationship("MessageReaction", back_populates="message", cascade="all, delete-orphan")


class MessageReaction(Base):
    __tablename__ = "message_reactions"
    __table_args__ = (UniqueConstraint("message_id", "user_id", "emoji", name="uq_message_reaction"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    message_id = Column(String(36), ForeignKey("circle_messages.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    emoji = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    message = relationship("CircleMessage", back_populates="reactions")


__all__ = ["CircleMessage", "MessageReaction"]
