"""Ambient (cookie) session helpers.

The ambient session is Starlette's signed-cookie `request.session`. The
cookie lives on the client, so it only ever holds keys into server-side
stores:

- `pending_login`: the state issued by `begin_login`. The StateRecord itself
  lives in the StateStore and is consumed there by the first callback, so a
  replayed cookie cannot present the same state twice.
- `auth_session_id`: after a successful login, the key of the AuthSession in
  the session store.
"""

from __future__ import annotations

import logging
import time

from starlette.requests import Request

from authbridge.auth.service import LoginRequest
from authbridge.auth.storage import DEFAULT_STATE_TTL_SECONDS, StateRecord, StateStore

logger = logging.getLogger(__name__)

PENDING_LOGIN_KEY = "pending_login"
AUTH_SESSION_KEY = "auth_session_id"


async def remember_login(
    request: Request,
    login: LoginRequest,
    state_store: StateStore,
    *,
    ttl_seconds: float = DEFAULT_STATE_TTL_SECONDS,
    now: float | None = None,
) -> StateRecord:
    """Record a freshly issued state and point the ambient session at it.

    A newer login attempt replaces any pending one.
    """
    previous = request.session.get(PENDING_LOGIN_KEY)
    if isinstance(previous, str):
        await state_store.discard_state(previous)

    created_at = now if now is not None else time.time()
    record = StateRecord(
        state=login.state,
        provider=login.provider,
        created_at=created_at,
        expires_at=created_at + ttl_seconds,
    )
    await state_store.store_state(record)
    request.session[PENDING_LOGIN_KEY] = record.state
    return record


async def pop_pending_state(
    request: Request, provider: str, state_store: StateStore
) -> str | None:
    """Consume the pending login and return its state if it is still usable.

    The record is removed from the store whatever the outcome. Returns None
    when there is no pending login, when it was already consumed or expired,
    or when it was issued for another provider.
    """
    key = request.session.pop(PENDING_LOGIN_KEY, None)
    if not isinstance(key, str):
        return None

    record = await state_store.consume_state(key)
    if record is None:
        logger.warning(f"Callback for '{provider}' without a live pending login")
        return None
    if record.provider != provider:
        logger.warning(
            f"Callback for '{provider}' but pending login was issued for '{record.provider}'"
        )
        return None
    return record.state


def get_auth_session_id(request: Request) -> str | None:
    value = request.session.get(AUTH_SESSION_KEY)
    return value if isinstance(value, str) else None


def set_auth_session_id(request: Request, session_id: str) -> None:
    """Point the ambient session at a new AuthSession, dropping anything else it held."""
    request.session.clear()
    request.session[AUTH_SESSION_KEY] = session_id


def forget_auth_session(request: Request) -> None:
    request.session.pop(AUTH_SESSION_KEY, None)


__all__ = [
    "AUTH_SESSION_KEY",
    "PENDING_LOGIN_KEY",
    "forget_auth_session",
    "get_auth_session_id",
    "pop_pending_state",
    "remember_login",
    "set_auth_session_id",
]
