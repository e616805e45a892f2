"""Server-side storage for pending login states and authenticated identities."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

from pydantic import Field, model_validator

from authbridge.models import BridgeBaseModel

logger = logging.getLogger(__name__)

DEFAULT_STATE_TTL_SECONDS = 10 * 60


class AuthSession(BridgeBaseModel):
    """Authenticated-identity record, keyed by an opaque session id."""

    session_id: str = Field(repr=False)
    provider: str
    user_id: str
    display_name: str
    email: str | None = None
    picture_url: str | None = None
    access_token: str = Field(repr=False)
    refresh_token: str | None = Field(default=None, repr=False)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: float
    expires_at: float

    @model_validator(mode="after")
    def _check_lifetime(self) -> AuthSession:
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be later than created_at")
        return self

    def is_expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at


class SessionStore(Protocol):
    """Abstract interface for session storage.

    Backends must ensure:
    - `get` never returns a session at or past `expires_at`; reading an
      expired session deletes it and returns None.
    - `delete` is idempotent.
    - Operations on different keys do not interfere.
    """

    async def create(self, session: AuthSession) -> AuthSession: ...

    async def get(self, session_id: str) -> AuthSession | None: ...

    async def delete(self, session_id: str) -> None: ...

    async def find_by_provider_user(self, provider: str, user_id: str) -> AuthSession | None: ...

    async def list_active(self) -> list[AuthSession]: ...


class InMemorySessionStore(SessionStore):
    """Process-lifetime session store backed by a dict.

    Expiry is enforced lazily on read; there is no background sweep. Every
    operation touches a single key without awaiting, so concurrent tasks on
    the event loop cannot interleave inside one.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._sessions: dict[str, AuthSession] = {}
        self._clock = clock

    async def create(self, session: AuthSession) -> AuthSession:
        if session.session_id in self._sessions:
            logger.warning("Session id collision, overwriting existing session")
        self._sessions[session.session_id] = session
        logger.debug(f"Stored session for {session.provider}:{session.user_id}")
        return session

    async def get(self, session_id: str) -> AuthSession | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_expired(self._clock()):
            self._sessions.pop(session_id, None)
            logger.debug(f"Evicted expired session for {session.provider}:{session.user_id}")
            return None
        return session

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def find_by_provider_user(self, provider: str, user_id: str) -> AuthSession | None:
        """Return the most recently created live session for a provider user."""
        now = self._clock()
        matches = [
            s
            for s in self._sessions.values()
            if s.provider == provider and s.user_id == user_id and not s.is_expired(now)
        ]
        return max(matches, key=lambda s: s.created_at, default=None)

    async def list_active(self) -> list[AuthSession]:
        now = self._clock()
        return [s for s in self._sessions.values() if not s.is_expired(now)]

    def __len__(self) -> int:
        """Number of stored records, including expired ones not yet evicted."""
        return len(self._sessions)


class StateRecord(BridgeBaseModel):
    """Pending login: one anti-CSRF state bound to the provider it was issued for."""

    state: str = Field(repr=False)
    provider: str
    created_at: float
    expires_at: float

    def is_expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at


class StateStore(Protocol):
    """Abstract interface for pending login states.

    Backends must ensure:
    - `consume_state` returns a record at most once; the record is removed
      whether or not it has expired.
    - Expired records are never returned.
    """

    async def store_state(self, record: StateRecord) -> None: ...

    async def consume_state(self, state: str) -> StateRecord | None: ...

    async def discard_state(self, state: str) -> None: ...


class InMemoryStateStore(StateStore):
    """Process-lifetime state store backed by a dict.

    Abandoned logins are pruned whenever a new state is stored.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._states: dict[str, StateRecord] = {}
        self._clock = clock

    async def store_state(self, record: StateRecord) -> None:
        now = self._clock()
        for key in [k for k, r in self._states.items() if r.is_expired(now)]:
            del self._states[key]
        self._states[record.state] = record

    async def consume_state(self, state: str) -> StateRecord | None:
        record = self._states.pop(state, None)
        if record is None:
            return None
        if record.is_expired(self._clock()):
            logger.info(f"Pending login for '{record.provider}' expired")
            return None
        return record

    async def discard_state(self, state: str) -> None:
        self._states.pop(state, None)

    def __len__(self) -> int:
        return len(self._states)


__all__ = [
    "DEFAULT_STATE_TTL_SECONDS",
    "AuthSession",
    "InMemorySessionStore",
    "InMemoryStateStore",
    "SessionStore",
    "StateRecord",
    "StateStore",
]
