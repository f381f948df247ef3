"""Circle membership and message history routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..errors import EmptyContent, NotACircleMember
from ..schemas import (
    CircleListResponse,
    CircleMessageResponse,
    MessageCreateRequest,
    SuccessResponse,
)
from ..services import (
    chat_fanout,
    circle_storage,
    get_current_user_id,
    join_circle,
    leave_circle,
    notification_broadcaster,
)

router = APIRouter(prefix="/api/circles", tags=["circles"])


async def _require_membership(circle_id: str, user_id: str) -> None:
    if not await circle_storage.is_circle_member(circle_id, user_id):
        raise NotACircleMember()


@router.get("", response_model=CircleListResponse)
async def list_my_circles(current_user_id: str = Depends(get_current_user_id)) -> CircleListResponse:
    circles = await circle_storage.list_user_circles(current_user_id)
    return CircleListResponse(items=circles)


@router.get("/{circle_id}/messages", response_model=list[CircleMessageResponse])
async def circle_messages_endpoint(
    circle_id: str,
    current_user_id: str = Depends(get_current_user_id),
) -> list[CircleMessageResponse]:
    await _require_membership(circle_id, current_user_id)
    return await circle_storage.get_circle_messages(circle_id)


@router.post(
    "/{circle_id}/messages",
    response_model=CircleMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_circle_message_endpoint(
    circle_id: str,
    payload: MessageCreateRequest,
    current_user_id: str = Depends(get_current_user_id),
) -> CircleMessageResponse:
    if not payload.content.strip():
        raise EmptyContent()
    await _require_membership(circle_id, current_user_id)
    return await chat_fanout.publish(circle_id, current_user_id, payload.content)


@router.post("/{circle_id}/join", response_model=SuccessResponse)
async def join_circle_endpoint(
    circle_id: str,
    current_user_id: str = Depends(get_current_user_id),
) -> SuccessResponse:
    await join_circle(
        circle_storage,
        notification_broadcaster,
        circle_id=circle_id,
        user_id=current_user_id,
    )
    return SuccessResponse()


@router.post("/{circle_id}/leave", response_model=SuccessResponse)
async def leave_circle_endpoint(
    circle_id: str,
    current_user_id: str = Depends(get_current_user_id),
) -> SuccessResponse:
    await leave_circle(circle_storage, circle_id=circle_id, user_id=current_user_id)
    return SuccessResponse()


__all__ = ["router"]
