"""authbridge authentication engine.

This package drives several protocol-incompatible OAuth 2.0 identity providers
through one login state machine and keeps the resulting identities in a
session store.

## Key Components

### Provider adapters
- `ProviderAdapter`: protocol every provider implements
- `LineProviderAdapter`, `GoogleProviderAdapter`, `FacebookProviderAdapter`
- `DemoProviderAdapter`: offline provider for tests and local development

### Coordination
- `ProviderRegistry`: adapters configured for this process
- `AuthService`: issues state, completes callbacks, resolves sessions

### Storage
- `AuthSession`: the authenticated-identity record
- `SessionStore` / `InMemorySessionStore`: keyed storage with expiry on read
- `StateStore` / `InMemoryStateStore`: single-use pending login states

## Quick Example

```python
from authbridge.auth import AuthService, InMemorySessionStore, ProviderRegistry
from authbridge.auth.models import ProviderConfigModel

registry = ProviderRegistry.from_config(
    {"google": ProviderConfigModel(client_id="...", client_secret="...")}
)
service = AuthService(registry=registry, session_store=InMemorySessionStore())
login = service.begin_login("google", "https://app.example.com")
```
"""

from .contracts import (
    AuthError,
    AuthorizationUrlError,
    GrantResult,
    InvalidStateError,
    NormalizedProfile,
    ProfileFetchError,
    ProviderAdapter,
    ProviderDeniedError,
    ProviderDescriptor,
    ProviderSummary,
    SessionNotFoundError,
    SessionStoreError,
    TokenExchangeError,
    UnknownProviderError,
)
from .models import HttpTransportConfigModel, ProviderConfigModel
from .providers import (
    DemoProviderAdapter,
    FacebookProviderAdapter,
    GoogleProviderAdapter,
    LineProviderAdapter,
)
from .registry import ProviderRegistry
from .service import AuthResult, AuthService, LoginRequest, LoginStage
from .storage import (
    AuthSession,
    InMemorySessionStore,
    InMemoryStateStore,
    SessionStore,
    StateRecord,
    StateStore,
)

__all__ = [
    # Errors
    "AuthError",
    "AuthorizationUrlError",
    "InvalidStateError",
    "ProfileFetchError",
    "ProviderDeniedError",
    "SessionNotFoundError",
    "SessionStoreError",
    "TokenExchangeError",
    "UnknownProviderError",
    # Contracts
    "GrantResult",
    "NormalizedProfile",
    "ProviderAdapter",
    "ProviderDescriptor",
    "ProviderSummary",
    # Config
    "HttpTransportConfigModel",
    "ProviderConfigModel",
    # Adapters
    "DemoProviderAdapter",
    "FacebookProviderAdapter",
    "GoogleProviderAdapter",
    "LineProviderAdapter",
    # Coordination
    "AuthResult",
    "AuthService",
    "LoginRequest",
    "LoginStage",
    "ProviderRegistry",
    # Storage
    "AuthSession",
    "InMemorySessionStore",
    "InMemoryStateStore",
    "SessionStore",
    "StateRecord",
    "StateStore",
]
