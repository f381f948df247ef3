"""Aggregate router exports."""
from .circles import router as circles_router
from .messages import router as messages_router
from .notifications import router as notifications_router
from .realtime import router as realtime_router

__all__ = [
    "circles_router",
    "messages_router",
    "notifications_router",
    "realtime_router",
]
