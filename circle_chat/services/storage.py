"""Asynchronous storage facade over the SQLAlchemy models.

Every coroutine opens its own short-lived session and runs the blocking ORM
work in a worker thread, so a slow query only stalls the frame or request
that awaited it.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import create_session
from ..models import Circle, CircleMessage, MessageReaction, Notification, UserSession, circle_members
from ..schemas import (
    CircleMessageResponse,
    CircleResponse,
    NotificationResponse,
    ReactionResponse,
    ReactionSummary,
)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CircleStorage:
    """Persistence collaborator used by the chat core and the REST routers."""

    def __init__(self, session_factory: Callable[[], Session] = create_session) -> None:
        self._session_factory = session_factory

    async def _run(self, work: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self._run_sync, work)

    def _run_sync(self, work: Callable[[Session], T]) -> T:
        with self._session_factory() as session:
            try:
                return work(session)
            except SQLAlchemyError:
                session.rollback()
                raise

    # -- sessions -----------------------------------------------------------------

    async def get_session_user(self, sid: str) -> str | None:
        """Return the user id bound to a live session, if any."""

        def _work(db: Session) -> str | None:
            record = db.get(UserSession, sid)
            if record is None or not record.user_id:
                return None
            if _as_aware(record.expires_at) <= _utcnow():
                return None
            return str(record.user_id)

        return await self._run(_work)

    # -- circles ------------------------------------------------------------------

    async def is_circle_member(self, circle_id: str, user_id: str) -> bool:
        def _work(db: Session) -> bool:
            stmt = select(circle_members.c.user_id).where(
                circle_members.c.circle_id == circle_id,
                circle_members.c.user_id == user_id,
            )
            return db.execute(stmt).first() is not None

        return await self._run(_work)

    async def get_user_circles(self, user_id: str) -> list[str]:
        """Return the ids of every circle the user currently belongs to."""

        def _work(db: Session) -> list[str]:
            stmt = select(circle_members.c.circle_id).where(circle_members.c.user_id == user_id)
            return [str(circle_id) for circle_id in db.scalars(stmt)]

        return await self._run(_work)

    async def list_user_circles(self, user_id: str) -> list[CircleResponse]:
        def _work(db: Session) -> list[CircleResponse]:
            stmt = (
                select(Circle)
                .join(circle_members, circle_members.c.circle_id == Circle.id)
                .where(circle_members.c.user_id == user_id)
                .order_by(Circle.name.asc())
            )
            return [CircleResponse.model_validate(circle) for circle in db.scalars(stmt)]

        return await self._run(_work)

    async def get_circle(self, circle_id: str) -> CircleResponse | None:
        def _work(db: Session) -> CircleResponse | None:
            circle = db.get(Circle, circle_id)
            return CircleResponse.model_validate(circle) if circle is not None else None

        return await self._run(_work)

    async def add_circle_member(self, circle_id: str, user_id: str) -> bool:
        """Insert the membership row; returns ``False`` when it already existed."""

        def _work(db: Session) -> bool:
            existing = db.execute(
                select(circle_members.c.user_id).where(
                    circle_members.c.circle_id == circle_id,
                    circle_members.c.user_id == user_id,
                )
            ).first()
            if existing is not None:
                return False
            try:
                db.execute(circle_members.insert().values(circle_id=circle_id, user_id=user_id))
                db.commit()
            except IntegrityError:
                db.rollback()
                return False
            return True

        return await self._run(_work)

    async def remove_circle_member(self, circle_id: str, user_id: str) -> bool:
        def _work(db: Session) -> bool:
            result = db.execute(
                delete(circle_members).where(
                    circle_members.c.circle_id == circle_id,
                    circle_members.c.user_id == user_id,
                )
            )
            db.commit()
            return bool(result.rowcount)

        return await self._run(_work)

    # -- messages -----------------------------------------------------------------

    async def get_circle_messages(self, circle_id: str) -> list[CircleMessageResponse]:
        """Return the circle's messages ordered chronologically, soft-deleted ones included."""

        def _work(db: Session) -> list[CircleMessageResponse]:
            stmt = (
                select(CircleMessage)
                .where(CircleMessage.circle_id == circle_id)
                .order_by(CircleMessage.created_at.asc())
            )
            return [CircleMessageResponse.model_validate(item) for item in db.scalars(stmt)]

        return await self._run(_work)

    async def get_message(self, message_id: str) -> CircleMessageResponse | None:
        def _work(db: Session) -> CircleMessageResponse | None:
            message = db.get(CircleMessage, message_id)
            return CircleMessageResponse.model_validate(message) if message is not None else None

        return await self._run(_work)

    async def create_message(self, circle_id: str, author_id: str, content: str) -> CircleMessageResponse:
        def _work(db: Session) -> CircleMessageResponse:
            message = CircleMessage(
                circle_id=circle_id,
                author_id=author_id,
                content=content,
                created_at=_utcnow(),
            )
            db.add(message)
            db.commit()
            db.refresh(message)
            return CircleMessageResponse.model_validate(message)

        return await self._run(_work)

    async def edit_message(self, message_id: str, content: str) -> CircleMessageResponse | None:
        def _work(db: Session) -> CircleMessageResponse | None:
            message = db.get(CircleMessage, message_id)
            if message is None:
                return None
            setattr(message, "content", content)
            setattr(message, "edited", True)
            setattr(message, "edited_at", _utcnow())
            db.commit()
            db.refresh(message)
            return CircleMessageResponse.model_validate(message)

        return await self._run(_work)

    async def delete_message(self, message_id: str) -> CircleMessageResponse | None:
        """Soft-delete: the row and its reactions stay, the content is cleared."""

        def _work(db: Session) -> CircleMessageResponse | None:
            message = db.get(CircleMessage, message_id)
            if message is None:
                return None
            if not message.deleted:
                setattr(message, "deleted", True)
                setattr(message, "deleted_at", _utcnow())
                setattr(message, "content", "")
                db.commit()
                db.refresh(message)
            return CircleMessageResponse.model_validate(message)

        return await self._run(_work)

    # -- reactions ----------------------------------------------------------------

    async def add_reaction(self, message_id: str, user_id: str, emoji: str) -> ReactionResponse:
        """Upsert the (message, user, emoji) triple and return the stored row."""

        def _find(db: Session) -> MessageReaction | None:
            stmt = select(MessageReaction).where(
                MessageReaction.message_id == message_id,
                MessageReaction.user_id == user_id,
                MessageReaction.emoji == emoji,
            )
            return db.scalar(stmt)

        def _work(db: Session) -> ReactionResponse:
            existing = _find(db)
            if existing is not None:
                return ReactionResponse.model_validate(existing)
            reaction = MessageReaction(message_id=message_id, user_id=user_id, emoji=emoji, created_at=_utcnow())
            db.add(reaction)
            try:
                db.commit()
            except IntegrityError:
                # Lost a race with an identical insert; the row we wanted exists.
                db.rollback()
                existing = _find(db)
                if existing is None:
                    raise
                return ReactionResponse.model_validate(existing)
            db.refresh(reaction)
            return ReactionResponse.model_validate(reaction)

        return await self._run(_work)

    async def remove_reaction(self, message_id: str, user_id: str, emoji: str) -> None:
        def _work(db: Session) -> None:
            db.execute(
                delete(MessageReaction).where(
                    MessageReaction.message_id == message_id,
                    MessageReaction.user_id == user_id,
                    MessageReaction.emoji == emoji,
                )
            )
            db.commit()

        await self._run(_work)

    async def get_message_reactions(self, message_id: str) -> list[ReactionSummary]:
        def _work(db: Session) -> list[ReactionSummary]:
            stmt = (
                select(MessageReaction)
                .where(MessageReaction.message_id == message_id)
                .order_by(MessageReaction.created_at.asc())
            )
            return [ReactionSummary.model_validate(item) for item in db.scalars(stmt)]

        return await self._run(_work)

    # -- notifications ------------------------------------------------------------

    async def create_notification(
        self,
        user_id: str,
        *,
        type_: str,
        title: str,
        message: str,
        link: str | None = None,
    ) -> NotificationResponse:
        def _work(db: Session) -> NotificationResponse:
            notification = Notification(
                user_id=user_id,
                type=str(type_),
                title=title,
                message=message,
                link=link,
                created_at=_utcnow(),
            )
            db.add(notification)
            db.commit()
            db.refresh(notification)
            return NotificationResponse.model_validate(notification)

        return await self._run(_work)

    async def list_notifications(self, user_id: str) -> list[NotificationResponse]:
        def _work(db: Session) -> list[NotificationResponse]:
            stmt = (
                select(Notification)
                .where(Notification.user_id == user_id)
                .order_by(Notification.created_at.desc())
            )
            return [NotificationResponse.model_validate(item) for item in db.scalars(stmt)]

        return await self._run(_work)

    async def get_notification(self, notification_id: str) -> NotificationResponse | None:
        def _work(db: Session) -> NotificationResponse | None:
            record = db.get(Notification, notification_id)
            return NotificationResponse.model_validate(record) if record is not None else None

        return await self._run(_work)

    async def mark_notification_read(self, notification_id: str) -> None:
        def _work(db: Session) -> None:
            record = db.get(Notification, notification_id)
            if record is None or record.read:
                return
            setattr(record, "read", True)
            setattr(record, "read_at", _utcnow())
            db.commit()

        await self._run(_work)


__all__ = ["CircleStorage"]
