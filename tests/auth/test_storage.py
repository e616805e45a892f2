"""Tests for AuthSession and InMemorySessionStore."""

import pytest

from authbridge.auth.storage import (
    AuthSession,
    InMemorySessionStore,
    InMemoryStateStore,
    StateRecord,
)


class _Clock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _session(
    session_id: str = "sid-1",
    *,
    provider: str = "google",
    user_id: str = "u1",
    created_at: float = 1_000.0,
    ttl: float = 60.0,
) -> AuthSession:
    return AuthSession(
        session_id=session_id,
        provider=provider,
        user_id=user_id,
        display_name="User",
        access_token="at",
        created_at=created_at,
        expires_at=created_at + ttl,
    )


class TestAuthSession:
    def test_expires_at_must_follow_created_at(self) -> None:
        with pytest.raises(ValueError):
            _session(ttl=0)

    def test_expiry_boundary_is_inclusive(self) -> None:
        session = _session(ttl=60)
        assert not session.is_expired(1_059.9)
        assert session.is_expired(1_060.0)

    def test_tokens_are_hidden_from_repr(self) -> None:
        text = repr(_session())
        assert "access_token" not in text
        assert "session_id" not in text


class TestInMemorySessionStore:
    @pytest.mark.asyncio
    async def test_create_then_get(self) -> None:
        store = InMemorySessionStore(clock=_Clock())
        session = _session()
        await store.create(session)

        assert await store.get("sid-1") == session
        assert await store.get("unknown") is None

    @pytest.mark.asyncio
    async def test_expired_session_is_evicted_on_read(self) -> None:
        clock = _Clock()
        store = InMemorySessionStore(clock=clock)
        await store.create(_session(ttl=60))
        assert len(store) == 1

        clock.now = 1_060.0
        assert await store.get("sid-1") is None
        assert len(store) == 0
        # Reading again stays empty
        assert await store.get("sid-1") is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self) -> None:
        store = InMemorySessionStore(clock=_Clock())
        await store.create(_session())

        await store.delete("sid-1")
        await store.delete("sid-1")
        await store.delete("never-existed")
        assert await store.get("sid-1") is None

    @pytest.mark.asyncio
    async def test_sessions_for_same_user_are_independent(self) -> None:
        store = InMemorySessionStore(clock=_Clock())
        await store.create(_session("a"))
        await store.create(_session("b"))

        await store.delete("a")
        assert await store.get("a") is None
        assert await store.get("b") is not None

    @pytest.mark.asyncio
    async def test_find_by_provider_user_returns_newest_live_session(self) -> None:
        clock = _Clock(now=1_010.0)
        store = InMemorySessionStore(clock=clock)
        await store.create(_session("old", created_at=1_000.0, ttl=5))
        await store.create(_session("mid", created_at=1_002.0))
        await store.create(_session("new", created_at=1_005.0))
        await store.create(_session("other", provider="line", created_at=1_009.0))

        found = await store.find_by_provider_user("google", "u1")
        assert found is not None
        assert found.session_id == "new"
        assert await store.find_by_provider_user("facebook", "u1") is None

    @pytest.mark.asyncio
    async def test_list_active_skips_expired(self) -> None:
        clock = _Clock(now=1_030.0)
        store = InMemorySessionStore(clock=clock)
        await store.create(_session("short", ttl=10))
        await store.create(_session("long", ttl=100))

        active = await store.list_active()
        assert [s.session_id for s in active] == ["long"]


def _state(state: str = "st-1", *, created_at: float = 1_000.0, ttl: float = 600.0) -> StateRecord:
    return StateRecord(
        state=state, provider="line", created_at=created_at, expires_at=created_at + ttl
    )


class TestInMemoryStateStore:
    @pytest.mark.asyncio
    async def test_consume_is_single_use(self) -> None:
        store = InMemoryStateStore(clock=_Clock())
        record = _state()
        await store.store_state(record)

        assert await store.consume_state("st-1") == record
        assert await store.consume_state("st-1") is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_expired_state_is_removed_and_not_returned(self) -> None:
        clock = _Clock()
        store = InMemoryStateStore(clock=clock)
        await store.store_state(_state(ttl=60))

        clock.now = 1_060.0
        assert await store.consume_state("st-1") is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_storing_prunes_abandoned_states(self) -> None:
        clock = _Clock()
        store = InMemoryStateStore(clock=clock)
        await store.store_state(_state("abandoned", ttl=10))

        clock.now = 1_100.0
        await store.store_state(_state("fresh", created_at=1_100.0))
        assert len(store) == 1
        assert await store.consume_state("fresh") is not None

    @pytest.mark.asyncio
    async def test_discard_is_idempotent(self) -> None:
        store = InMemoryStateStore(clock=_Clock())
        await store.store_state(_state())

        await store.discard_state("st-1")
        await store.discard_state("st-1")
        assert await store.consume_state("st-1") is None

    def test_state_value_hidden_from_repr(self) -> None:
        assert "st-1" not in repr(_state())
