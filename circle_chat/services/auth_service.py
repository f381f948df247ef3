"""Session-cookie authentication for HTTP routes."""
from __future__ import annotations

from fastapi import HTTPException, Request, status

from .realtime import session_resolver


async def get_current_user_id(request: Request) -> str:
    """FastAPI dependency resolving the caller from the shared session store."""

    user_id = await session_resolver.resolve(request.headers.get("cookie"))
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user_id


__all__ = ["get_current_user_id"]
