"""Provider adapters.

Each adapter is a thin client for one identity provider that conforms to the
ProviderAdapter protocol. Adapters handle only protocol communication:

- Building authorization URLs
- Exchanging authorization codes for tokens
- Fetching and normalizing the user profile

Adapters do NOT handle state generation or validation (AuthService), the
ambient browser session (server layer), or session storage (SessionStore).
"""

from .demo import DemoProviderAdapter
from .facebook import FacebookProviderAdapter
from .google import GoogleProviderAdapter
from .line import LineProviderAdapter

__all__ = [
    "DemoProviderAdapter",
    "FacebookProviderAdapter",
    "GoogleProviderAdapter",
    "LineProviderAdapter",
]
