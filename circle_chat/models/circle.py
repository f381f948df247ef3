"""SQLAlchemy ORM model for circles."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from circle_chat.database import Base
from .associations import circle_members


def _new_id() -> str:
    return str(uuid.uuid4())


class Circle(Base):
    __tablename__ = "circles"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    creator = relationship("User", foreign_keys=[created_by])
    members = relationship("User", secondary=circle_members, back_populates="circles")
    messages = relationship("CircleMessage", back_populates="circle", cascade="all, delete-orphan")


__all__ = ["Circle"]
