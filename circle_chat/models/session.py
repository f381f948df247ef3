"""SQLAlchemy ORM model for the server-side session store."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, String

from circle_chat.database import Base


class UserSession(Base):
    """A login session keyed by the unsigned session id carried in the cookie.

    Rows are written by the HTTP login flow; this service only reads them.
    ``user_id`` stays empty for anonymous sessions.
    """

    __tablename__ = "user_sessions"

    sid = Column(String(255), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)


__all__ = ["UserSession"]
