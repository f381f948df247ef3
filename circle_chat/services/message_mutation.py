"""Create, edit, delete and react to circle messages.

Authorship is enforced here rather than at the transport, so the WebSocket
and REST paths share one set of rules. Membership is *not* checked by
:meth:`MessageMutationService.create`; callers verify it first.
"""
from __future__ import annotations

import logging

from ..errors import EmptyContent, MissingEmoji, NotAuthorized, NotFound
from ..schemas import CircleMessageResponse, ReactionResponse, ReactionSummary
from .storage import CircleStorage

logger = logging.getLogger(__name__)


class MessageMutationService:
    def __init__(self, storage: CircleStorage) -> None:
        self._storage = storage

    async def create(self, circle_id: str, user_id: str, content: str) -> CircleMessageResponse:
        return await self._storage.create_message(circle_id, user_id, content)

    async def edit(self, message_id: str, user_id: str, new_content: str) -> CircleMessageResponse:
        message = await self._require_own_message(message_id, user_id)
        content = (new_content or "").strip()
        if not content:
            raise EmptyContent()
        updated = await self._storage.edit_message(message.id, content)
        if updated is None:
            raise NotFound("Message not found")
        logger.info("Message %s edited by %s", message.id, user_id)
        return updated

    async def delete(self, message_id: str, user_id: str) -> CircleMessageResponse:
        message = await self._require_own_message(message_id, user_id, allow_deleted=True)
        if message.deleted:
            return message
        deleted = await self._storage.delete_message(message.id)
        if deleted is None:
            raise NotFound("Message not found")
        logger.info("Message %s deleted by %s", message.id, user_id)
        return deleted

    async def add_reaction(self, message_id: str, user_id: str, emoji: str) -> ReactionResponse:
        normalized = (emoji or "").strip()
        if not normalized:
            raise MissingEmoji()
        if await self._storage.get_message(message_id) is None:
            raise NotFound("Message not found")
        return await self._storage.add_reaction(message_id, user_id, normalized)

    async def remove_reaction(self, message_id: str, user_id: str, emoji: str) -> None:
        normalized = (emoji or "").strip()
        if not normalized:
            raise MissingEmoji()
        await self._storage.remove_reaction(message_id, user_id, normalized)

    async def get_reactions(self, message_id: str) -> list[ReactionSummary]:
        return await self._storage.get_message_reactions(message_id)

    async def _require_own_message(
        self,
        message_id: str,
        user_id: str,
        *,
        allow_deleted: bool = False,
    ) -> CircleMessageResponse:
        message = await self._storage.get_message(message_id)
        if message is None or (message.deleted and not allow_deleted):
            raise NotFound("Message not found")
        if message.author_id != user_id:
            raise NotAuthorized()
        return message


__all__ = ["MessageMutationService"]
