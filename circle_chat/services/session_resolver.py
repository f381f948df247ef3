"""Resolve the signed-in user behind a session cookie.

The session store is shared with the HTTP login flow. Cookie values look like
``s%3A<sid>.<signature>``: URL-encoded, prefixed with ``s:`` when signed, and
suffixed with a signature after the first ``.``. Only the unsigned session id
is used as the lookup key; signature checking is left to the session store.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable
from urllib.parse import unquote

from starlette.requests import cookie_parser

logger = logging.getLogger(__name__)

SessionLookup = Callable[[str], Awaitable[str | None]]

_SIGNED_PREFIX = "s:"


def extract_session_id(cookie_header: str | None, cookie_name: str) -> str | None:
    """Return the unsigned session id from a raw ``Cookie`` header, if present."""

    if not cookie_header:
        return None
    raw_value = cookie_parser(cookie_header).get(cookie_name)
    if not raw_value:
        return None
    value = unquote(raw_value)
    if value.startswith(_SIGNED_PREFIX):
        value = value[len(_SIGNED_PREFIX):]
    sid = value.split(".", 1)[0].strip()
    return sid or None


class SessionResolver:
    """Turn a ``Cookie`` header into a user id, or ``None``. Never raises."""

    def __init__(self, lookup: SessionLookup, cookie_name: str) -> None:
        self._lookup = lookup
        self._cookie_name = cookie_name

    async def resolve(self, cookie_header: str | None) -> str | None:
        try:
            sid = extract_session_id(cookie_header, self._cookie_name)
            if sid is None:
                return None
            user_id = await self._lookup(sid)
        except Exception:
            logger.warning("Session lookup failed", exc_info=True)
            return None
        if user_id is None:
            logger.debug("No authenticated session for presented cookie")
        return user_id


__all__ = ["SessionLookup", "SessionResolver", "extract_session_id"]
