"""Message edit, delete and reaction routes.

Responses tell the client to refetch; live sockets are not notified of edits.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..schemas import (
    MessageEditRequest,
    MessageMutationResponse,
    ReactionCreateRequest,
    ReactionResponse,
    ReactionSummary,
    SuccessResponse,
)
from ..services import get_current_user_id, message_mutations

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.patch("/{message_id}", response_model=MessageMutationResponse)
async def edit_message_endpoint(
    message_id: str,
    payload: MessageEditRequest,
    current_user_id: str = Depends(get_current_user_id),
) -> MessageMutationResponse:
    message = await message_mutations.edit(message_id, current_user_id, payload.content)
    return MessageMutationResponse(message=message)


@router.delete("/{message_id}", response_model=MessageMutationResponse)
async def delete_message_endpoint(
    message_id: str,
    current_user_id: str = Depends(get_current_user_id),
) -> MessageMutationResponse:
    message = await message_mutations.delete(message_id, current_user_id)
    return MessageMutationResponse(message=message)


@router.post("/{message_id}/reactions", response_model=ReactionResponse)
async def add_reaction_endpoint(
    message_id: str,
    payload: ReactionCreateRequest,
    current_user_id: str = Depends(get_current_user_id),
) -> ReactionResponse:
    return await message_mutations.add_reaction(message_id, current_user_id, payload.emoji)


@router.delete("/{message_id}/reactions/{emoji}", response_model=SuccessResponse)
async def remove_reaction_endpoint(
    message_id: str,
    emoji: str,
    current_user_id: str = Depends(get_current_user_id),
) -> SuccessResponse:
    await message_mutations.remove_reaction(message_id, current_user_id, emoji)
    return SuccessResponse()


@router.get("/{message_id}/reactions", response_model=list[ReactionSummary])
async def list_reactions_endpoint(
    message_id: str,
    current_user_id: str = Depends(get_current_user_id),
) -> list[ReactionSummary]:
    return await message_mutations.get_reactions(message_id)


__all__ = ["router"]
