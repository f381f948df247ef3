"""Notification API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ..errors import NotFound
from ..schemas import NotificationResponse, SuccessResponse
from ..services import circle_storage, get_current_user_id

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_my_notifications(current_user_id: str = Depends(get_current_user_id)) -> list[NotificationResponse]:
    return await circle_storage.list_notifications(current_user_id)


@router.patch("/{notification_id}/read", response_model=SuccessResponse)
async def mark_notification_read_endpoint(
    notification_id: str,
    current_user_id: str = Depends(get_current_user_id),
) -> SuccessResponse:
    record = await circle_storage.get_notification(notification_id)
    if record is None:
        raise NotFound("Notification not found")
    if record.user_id != current_user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
    await circle_storage.mark_notification_read(notification_id)
    return SuccessResponse()


__all__ = ["router"]
