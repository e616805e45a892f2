"""Tests for the AuthService login coordinator."""

from urllib.parse import parse_qs, urlsplit

import pytest

from authbridge.auth.contracts import (
    AuthorizationUrlError,
    GrantResult,
    NormalizedProfile,
    ProviderDescriptor,
    SessionNotFoundError,
    SessionStoreError,
    UnknownProviderError,
)
from authbridge.auth.models import ProviderConfigModel
from authbridge.auth.providers.demo import DemoProviderAdapter
from authbridge.auth.registry import ProviderRegistry
from authbridge.auth.service import (
    DEFAULT_SESSION_TTL_SECONDS,
    AuthService,
    LoginStage,
    generate_session_id,
    generate_state,
    states_match,
)
from authbridge.auth.storage import AuthSession, InMemorySessionStore

BASE_URL = "https://host"


class _Clock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class _FailingStore(InMemorySessionStore):
    async def create(self, session: AuthSession) -> AuthSession:
        raise RuntimeError("disk full")

    async def delete(self, session_id: str) -> None:
        raise RuntimeError("disk full")


class _BrokenAdapter(DemoProviderAdapter):
    def build_authorize_url(self, *, callback_base_url: str, state: str) -> str:
        raise RuntimeError("cannot build")

    async def exchange_code(self, *, code: str, callback_base_url: str) -> GrantResult:
        self.exchange_calls += 1
        raise RuntimeError("unexpected")


class _ProfileBrokenAdapter(DemoProviderAdapter):
    async def fetch_profile(self, *, access_token: str) -> NormalizedProfile:
        raise KeyError("userId")


def _demo(**kwargs) -> DemoProviderAdapter:
    return DemoProviderAdapter(ProviderConfigModel(client_id="X", client_secret="Y"), **kwargs)


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


@pytest.fixture
def demo() -> DemoProviderAdapter:
    return _demo()


@pytest.fixture
def store(clock: _Clock) -> InMemorySessionStore:
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def service(demo: DemoProviderAdapter, store: InMemorySessionStore, clock: _Clock) -> AuthService:
    return AuthService(registry=ProviderRegistry([demo]), session_store=store, clock=clock)


def test_state_and_session_ids_are_high_entropy() -> None:
    states = {generate_state() for _ in range(50)}
    assert len(states) == 50
    assert all(len(s) == 64 for s in states)
    assert len(generate_session_id()) >= 43


@pytest.mark.parametrize(
    ("expected", "presented", "matches"),
    [
        ("abc", "abc", True),
        ("abc", "abd", False),
        (None, None, False),
        ("", "", False),
        ("abc", None, False),
        (None, "abc", False),
    ],
)
def test_states_match(expected: str | None, presented: str | None, matches: bool) -> None:
    assert states_match(expected, presented) is matches


def test_provider_listing(service: AuthService) -> None:
    assert [p.name for p in service.list_available_providers()] == ["demo"]
    assert service.is_provider_available("demo")
    assert not service.is_provider_available("myspace")


def test_begin_login_builds_url_with_fresh_state(service: AuthService) -> None:
    first = service.begin_login("demo", BASE_URL)
    second = service.begin_login("demo", BASE_URL)

    assert first.state != second.state
    query = parse_qs(urlsplit(first.authorize_url).query)
    assert query["client_id"] == ["X"]
    assert query["redirect_uri"] == ["https://host/auth/demo/callback"]
    assert query["state"] == [first.state]


def test_begin_login_unknown_provider(service: AuthService) -> None:
    with pytest.raises(UnknownProviderError):
        service.begin_login("myspace", BASE_URL)


def test_begin_login_adapter_failure(store: InMemorySessionStore) -> None:
    service = AuthService(
        registry=ProviderRegistry(
            [_BrokenAdapter(ProviderConfigModel(client_id="X", client_secret="Y"))]
        ),
        session_store=store,
    )
    with pytest.raises(AuthorizationUrlError) as exc_info:
        service.begin_login("demo", BASE_URL)
    assert exc_info.value.description == "Failed to generate auth URL for demo"
    assert exc_info.value.reason == "authorize_url_failed"


@pytest.mark.asyncio
async def test_full_login_creates_session(
    service: AuthService, demo: DemoProviderAdapter, store: InMemorySessionStore, clock: _Clock
) -> None:
    login = service.begin_login("demo", BASE_URL)

    result = await service.complete_login(
        "demo",
        code="DEMO_CODE_OK",
        expected_state=login.state,
        presented_state=login.state,
        callback_base_url=BASE_URL,
    )

    assert result.success
    assert result.stage is LoginStage.SESSION_CREATED
    session = result.session
    assert session is not None
    assert session.provider == "demo"
    assert session.user_id == "demo-user"
    assert session.display_name == "Demo User"
    assert session.email == "demo@example.com"
    assert session.created_at == clock.now
    assert session.expires_at == clock.now + 3600
    assert session.metadata == {"demo": True}
    assert await store.get(session.session_id) == session
    assert await service.get_session(session.session_id) == session


@pytest.mark.asyncio
async def test_session_lifetime_defaults_without_expires_in(
    store: InMemorySessionStore, clock: _Clock
) -> None:
    service = AuthService(
        registry=ProviderRegistry([_demo(expires_in=None)]), session_store=store, clock=clock
    )
    login = service.begin_login("demo", BASE_URL)

    result = await service.complete_login(
        "demo",
        code="DEMO_CODE_OK",
        expected_state=login.state,
        presented_state=login.state,
        callback_base_url=BASE_URL,
    )

    assert result.session is not None
    assert result.session.expires_at == clock.now + DEFAULT_SESSION_TTL_SECONDS


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("expected", "presented"),
    [("s1", "s2"), ("s1", None), (None, "s1"), (None, None)],
    ids=["mismatch", "missing-presented", "missing-expected", "both-missing"],
)
async def test_state_rejection_never_reaches_provider(
    service: AuthService,
    demo: DemoProviderAdapter,
    store: InMemorySessionStore,
    expected: str | None,
    presented: str | None,
) -> None:
    result = await service.complete_login(
        "demo",
        code="DEMO_CODE_OK",
        expected_state=expected,
        presented_state=presented,
        callback_base_url=BASE_URL,
    )

    assert not result.success
    assert result.stage is LoginStage.STATE_REJECTED
    assert result.reason == "invalid_state"
    assert result.error is not None
    assert result.error.description == "Invalid authorization parameters"
    assert demo.exchange_calls == 0
    assert len(store) == 0


@pytest.mark.asyncio
async def test_state_from_one_login_fails_another(
    service: AuthService, demo: DemoProviderAdapter
) -> None:
    first = service.begin_login("demo", BASE_URL)
    second = service.begin_login("demo", BASE_URL)

    result = await service.complete_login(
        "demo",
        code="DEMO_CODE_OK",
        expected_state=second.state,
        presented_state=first.state,
        callback_base_url=BASE_URL,
    )
    assert result.stage is LoginStage.STATE_REJECTED
    assert demo.exchange_calls == 0


@pytest.mark.asyncio
async def test_unknown_provider_after_valid_state(service: AuthService) -> None:
    result = await service.complete_login(
        "myspace",
        code="c",
        expected_state="s",
        presented_state="s",
        callback_base_url=BASE_URL,
    )
    assert result.stage is LoginStage.STATE_VALIDATED
    assert result.reason == "unknown_provider"


@pytest.mark.asyncio
async def test_missing_code_fails_exchange(service: AuthService, demo: DemoProviderAdapter) -> None:
    result = await service.complete_login(
        "demo", code=None, expected_state="s", presented_state="s", callback_base_url=BASE_URL
    )
    assert result.stage is LoginStage.EXCHANGE_FAILED
    assert result.reason == "token_exchange_failed"
    assert demo.exchange_calls == 0


@pytest.mark.asyncio
async def test_rejected_code_fails_exchange(
    service: AuthService, demo: DemoProviderAdapter, store: InMemorySessionStore
) -> None:
    result = await service.complete_login(
        "demo", code="WRONG", expected_state="s", presented_state="s", callback_base_url=BASE_URL
    )
    assert result.stage is LoginStage.EXCHANGE_FAILED
    assert result.error is not None
    assert result.error.status_code == 400
    assert demo.profile_calls == 0
    assert len(store) == 0


@pytest.mark.asyncio
async def test_unexpected_exchange_exception_becomes_result(store: InMemorySessionStore) -> None:
    adapter = _BrokenAdapter(ProviderConfigModel(client_id="X", client_secret="Y"))
    service = AuthService(registry=ProviderRegistry([adapter]), session_store=store)

    result = await service.complete_login(
        "demo", code="c", expected_state="s", presented_state="s", callback_base_url=BASE_URL
    )
    assert result.stage is LoginStage.EXCHANGE_FAILED
    assert result.reason == "token_exchange_failed"


@pytest.mark.asyncio
async def test_profile_failure_creates_no_session(store: InMemorySessionStore) -> None:
    adapter = _ProfileBrokenAdapter(ProviderConfigModel(client_id="X", client_secret="Y"))
    service = AuthService(registry=ProviderRegistry([adapter]), session_store=store)

    result = await service.complete_login(
        "demo",
        code="DEMO_CODE_OK",
        expected_state="s",
        presented_state="s",
        callback_base_url=BASE_URL,
    )
    assert result.stage is LoginStage.FETCH_FAILED
    assert result.reason == "profile_fetch_failed"
    assert len(store) == 0


@pytest.mark.asyncio
async def test_store_failure_is_reported(demo: DemoProviderAdapter) -> None:
    service = AuthService(registry=ProviderRegistry([demo]), session_store=_FailingStore())

    result = await service.complete_login(
        "demo",
        code="DEMO_CODE_OK",
        expected_state="s",
        presented_state="s",
        callback_base_url=BASE_URL,
    )
    assert not result.success
    assert result.stage is LoginStage.PROFILE_FETCHED
    assert result.reason == "session_store_failed"


@pytest.mark.asyncio
async def test_get_session_errors(
    service: AuthService, store: InMemorySessionStore, clock: _Clock
) -> None:
    with pytest.raises(SessionNotFoundError, match="Not authenticated"):
        await service.get_session(None)
    with pytest.raises(SessionNotFoundError, match="Session not found or expired"):
        await service.get_session("missing")

    login = service.begin_login("demo", BASE_URL)
    result = await service.complete_login(
        "demo",
        code="DEMO_CODE_OK",
        expected_state=login.state,
        presented_state=login.state,
        callback_base_url=BASE_URL,
    )
    assert result.session is not None

    clock.now += 3600
    with pytest.raises(SessionNotFoundError):
        await service.get_session(result.session.session_id)
    assert len(store) == 0


@pytest.mark.asyncio
async def test_logout_removes_session(service: AuthService) -> None:
    login = service.begin_login("demo", BASE_URL)
    result = await service.complete_login(
        "demo",
        code="DEMO_CODE_OK",
        expected_state=login.state,
        presented_state=login.state,
        callback_base_url=BASE_URL,
    )
    assert result.session is not None

    await service.logout(result.session.session_id)
    await service.logout(result.session.session_id)
    await service.logout(None)
    with pytest.raises(SessionNotFoundError):
        await service.get_session(result.session.session_id)


@pytest.mark.asyncio
async def test_logout_store_failure(demo: DemoProviderAdapter) -> None:
    service = AuthService(registry=ProviderRegistry([demo]), session_store=_FailingStore())
    with pytest.raises(SessionStoreError):
        await service.logout("sid")


def test_descriptor_hides_client_secret(demo: DemoProviderAdapter) -> None:
    assert isinstance(demo.descriptor, ProviderDescriptor)
    assert "client_secret" not in repr(demo.descriptor)


@pytest.mark.asyncio
async def test_demo_registration_end_to_end(clock: _Clock) -> None:
    adapter = _demo(access_token="tok", expires_in=60, user_id="42", user_name="Ada", email=None)
    registry = ProviderRegistry.from_config(
        {"demo": ProviderConfigModel(client_id="X", client_secret="Y")}
    )
    registry.register(adapter)
    service = AuthService(
        registry=registry, session_store=InMemorySessionStore(clock=clock), clock=clock
    )

    login = service.begin_login("demo", "https://host")
    assert "client_id=X" in login.authorize_url
    assert "redirect_uri=https%3A%2F%2Fhost%2Fauth%2Fdemo%2Fcallback" in login.authorize_url

    result = await service.complete_login(
        "demo",
        code="DEMO_CODE_OK",
        expected_state=login.state,
        presented_state=login.state,
        callback_base_url="https://host",
    )

    assert result.session is not None
    assert result.session.user_id == "42"
    assert result.session.display_name == "Ada"
    assert result.session.expires_at == pytest.approx(clock.now + 60)
