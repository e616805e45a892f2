"""AuthService coordinates the authorize -> callback -> session pipeline.

One login attempt moves through these stages:

    INITIATED -> CALLBACK_RECEIVED -> STATE_VALIDATED | STATE_REJECTED
              -> TOKEN_EXCHANGED | EXCHANGE_FAILED
              -> PROFILE_FETCHED | FETCH_FAILED
              -> SESSION_CREATED

`begin_login` covers INITIATED. `complete_login` covers the rest and never
raises: every failure becomes an `AuthResult` carrying the stage reached and
a reason string, so the transport layer can always answer with a
deterministic redirect.

Example usage:
    registry = ProviderRegistry.from_config(config.providers)
    service = AuthService(registry=registry, session_store=InMemorySessionStore())

    login = service.begin_login("google", "https://app.example.com")
    # store login.state in the browser session, redirect to login.authorize_url

    result = await service.complete_login(
        "google",
        code=code,
        expected_state=stored_state,
        presented_state=query_state,
        callback_base_url="https://app.example.com",
    )
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from enum import Enum

from authbridge.models import BridgeBaseModel

from .contracts import (
    AuthError,
    AuthorizationUrlError,
    InvalidStateError,
    NormalizedProfile,
    ProfileFetchError,
    ProviderSummary,
    SessionNotFoundError,
    SessionStoreError,
    TokenExchangeError,
    UnknownProviderError,
)
from .registry import ProviderRegistry
from .storage import AuthSession, SessionStore

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_SECONDS = 24 * 60 * 60

# 32 bytes => 256 bits of entropy for both state and session ids.
_TOKEN_BYTES = 32


class LoginStage(str, Enum):
    INITIATED = "initiated"
    CALLBACK_RECEIVED = "callback_received"
    STATE_VALIDATED = "state_validated"
    STATE_REJECTED = "state_rejected"
    TOKEN_EXCHANGED = "token_exchanged"
    EXCHANGE_FAILED = "exchange_failed"
    PROFILE_FETCHED = "profile_fetched"
    FETCH_FAILED = "fetch_failed"
    SESSION_CREATED = "session_created"


class LoginRequest(BridgeBaseModel):
    """Output of `begin_login`: where to send the browser, and what to remember."""

    provider: str
    authorize_url: str
    state: str


class AuthResult:
    """Tagged outcome of `complete_login`."""

    def __init__(
        self,
        *,
        stage: LoginStage,
        session: AuthSession | None = None,
        error: AuthError | None = None,
    ):
        self.stage = stage
        self.session = session
        self.error = error

    @property
    def success(self) -> bool:
        return self.session is not None and self.error is None

    @property
    def reason(self) -> str | None:
        return self.error.reason if self.error else None

    @classmethod
    def failed(cls, stage: LoginStage, error: AuthError) -> AuthResult:
        return cls(stage=stage, error=error)

    def __repr__(self) -> str:
        return f"AuthResult(success={self.success}, stage={self.stage.value}, reason={self.reason})"


def generate_state() -> str:
    return secrets.token_hex(_TOKEN_BYTES)


def generate_session_id() -> str:
    return secrets.token_urlsafe(_TOKEN_BYTES)


def states_match(expected: str | None, presented: str | None) -> bool:
    """Constant-time comparison; a missing value on either side never matches."""
    if not expected or not presented:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))


class AuthService:
    """Auth coordinator over a provider registry and a session store."""

    def __init__(
        self,
        *,
        registry: ProviderRegistry,
        session_store: SessionStore,
        default_session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.registry = registry
        self.session_store = session_store
        self.default_session_ttl_seconds = default_session_ttl_seconds
        self._clock = clock

    def list_available_providers(self) -> list[ProviderSummary]:
        return self.registry.summaries()

    def is_provider_available(self, provider_name: str) -> bool:
        return provider_name in self.registry

    def begin_login(self, provider_name: str, callback_base_url: str) -> LoginRequest:
        """Issue a fresh state and the provider authorize URL that carries it.

        Raises:
            UnknownProviderError: If the provider is not registered.
            AuthorizationUrlError: If the adapter fails to build the URL.
        """
        adapter = self.registry.get(provider_name)
        state = generate_state()
        try:
            authorize_url = adapter.build_authorize_url(
                callback_base_url=callback_base_url, state=state
            )
        except Exception as exc:
            logger.error(f"Failed to build authorize URL for {provider_name}: {exc}")
            raise AuthorizationUrlError(
                f"Failed to generate auth URL for {provider_name}"
            ) from exc

        logger.debug(f"[{provider_name}] {LoginStage.INITIATED.value}")
        return LoginRequest(provider=provider_name, authorize_url=authorize_url, state=state)

    async def complete_login(
        self,
        provider_name: str,
        *,
        code: str | None,
        expected_state: str | None,
        presented_state: str | None,
        callback_base_url: str,
    ) -> AuthResult:
        """Validate state, exchange the code, fetch the profile and store a session."""
        logger.debug(f"[{provider_name}] {LoginStage.CALLBACK_RECEIVED.value}")

        if not states_match(expected_state, presented_state):
            logger.warning(f"[{provider_name}] login rejected: state mismatch or missing")
            return AuthResult.failed(
                LoginStage.STATE_REJECTED,
                InvalidStateError("Invalid authorization parameters"),
            )
        logger.debug(f"[{provider_name}] {LoginStage.STATE_VALIDATED.value}")

        try:
            adapter = self.registry.get(provider_name)
        except UnknownProviderError as exc:
            logger.warning(f"[{provider_name}] login rejected: provider not registered")
            return AuthResult.failed(LoginStage.STATE_VALIDATED, exc)

        if not code:
            return AuthResult.failed(
                LoginStage.EXCHANGE_FAILED,
                TokenExchangeError("Missing authorization code"),
            )

        try:
            grant = await adapter.exchange_code(code=code, callback_base_url=callback_base_url)
        except TokenExchangeError as exc:
            logger.warning(
                f"[{provider_name}] token exchange failed: {exc.description} "
                f"(upstream status {exc.status_code})"
            )
            return AuthResult.failed(LoginStage.EXCHANGE_FAILED, exc)
        except Exception as exc:
            logger.error(f"[{provider_name}] token exchange raised: {exc}", exc_info=True)
            return AuthResult.failed(LoginStage.EXCHANGE_FAILED, TokenExchangeError(str(exc)))
        logger.debug(f"[{provider_name}] {LoginStage.TOKEN_EXCHANGED.value}")

        try:
            profile = await adapter.fetch_profile(access_token=grant.access_token)
        except ProfileFetchError as exc:
            logger.warning(
                f"[{provider_name}] profile fetch failed: {exc.description} "
                f"(upstream status {exc.status_code})"
            )
            return AuthResult.failed(LoginStage.FETCH_FAILED, exc)
        except Exception as exc:
            logger.error(f"[{provider_name}] profile fetch raised: {exc}", exc_info=True)
            return AuthResult.failed(LoginStage.FETCH_FAILED, ProfileFetchError(str(exc)))
        logger.debug(f"[{provider_name}] {LoginStage.PROFILE_FETCHED.value}")

        session = self._build_session(
            provider_name,
            profile,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_in=grant.expires_in,
        )
        try:
            session = await self.session_store.create(session)
        except Exception as exc:
            logger.error(f"[{provider_name}] failed to store session: {exc}", exc_info=True)
            return AuthResult.failed(
                LoginStage.PROFILE_FETCHED, SessionStoreError("Failed to store session")
            )

        logger.info(f"[{provider_name}] login succeeded for user {session.user_id}")
        return AuthResult(stage=LoginStage.SESSION_CREATED, session=session)

    async def get_session(self, session_id: str | None) -> AuthSession:
        """Resolve a live session.

        Raises:
            SessionNotFoundError: If the id is missing, unknown or expired.
        """
        if not session_id:
            raise SessionNotFoundError("Not authenticated")
        session = await self.session_store.get(session_id)
        if session is None:
            raise SessionNotFoundError("Session not found or expired")
        return session

    async def logout(self, session_id: str | None) -> None:
        """Delete a session. Unknown ids are ignored.

        Raises:
            SessionStoreError: If the store fails.
        """
        if not session_id:
            return
        try:
            await self.session_store.delete(session_id)
        except Exception as exc:
            raise SessionStoreError(f"Logout failed: {exc}") from exc

    def _build_session(
        self,
        provider_name: str,
        profile: NormalizedProfile,
        *,
        access_token: str,
        refresh_token: str | None,
        expires_in: float | None,
    ) -> AuthSession:
        now = self._clock()
        lifetime = expires_in if expires_in and expires_in > 0 else self.default_session_ttl_seconds
        metadata = dict(profile.metadata)
        if profile.status_message is not None:
            metadata["status_message"] = profile.status_message
        return AuthSession(
            session_id=generate_session_id(),
            provider=provider_name,
            user_id=profile.provider_user_id,
            display_name=profile.name,
            email=profile.email,
            picture_url=profile.picture_url,
            access_token=access_token,
            refresh_token=refresh_token,
            metadata=metadata,
            created_at=now,
            expires_at=now + lifetime,
        )


__all__ = [
    "DEFAULT_SESSION_TTL_SECONDS",
    "AuthResult",
    "AuthService",
    "LoginRequest",
    "LoginStage",
    "generate_session_id",
    "generate_state",
    "states_match",
]
