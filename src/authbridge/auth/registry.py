"""Provider registry: the set of adapters configured for this process.

The registry is built once at startup and passed explicitly to AuthService;
there is no module-level instance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping

from .contracts import ProviderAdapter, ProviderSummary, UnknownProviderError
from .http import DEFAULT_TIMEOUT_SECONDS
from .models import ProviderConfigModel
from .providers import (
    DemoProviderAdapter,
    FacebookProviderAdapter,
    GoogleProviderAdapter,
    LineProviderAdapter,
)

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[ProviderConfigModel, float], ProviderAdapter]

ADAPTER_FACTORIES: dict[str, AdapterFactory] = {
    "line": lambda config, timeout: LineProviderAdapter(config, timeout=timeout),
    "google": lambda config, timeout: GoogleProviderAdapter(config, timeout=timeout),
    "facebook": lambda config, timeout: FacebookProviderAdapter(config, timeout=timeout),
    "demo": lambda config, timeout: DemoProviderAdapter(config),
}


class ProviderRegistry:
    """Name-keyed collection of provider adapters, in registration order."""

    def __init__(self, adapters: list[ProviderAdapter] | None = None):
        self._adapters: dict[str, ProviderAdapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    @classmethod
    def from_config(
        cls,
        providers: Mapping[str, ProviderConfigModel],
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        route_prefix: str = "/auth",
    ) -> ProviderRegistry:
        """Build a registry from provider configuration.

        Providers without a complete client id/secret pair are skipped, not
        treated as errors. Providers without an explicit callback path get
        `{route_prefix}/{name}/callback`.

        Raises:
            ValueError: If a configured provider name has no adapter.
        """
        registry = cls()
        for name, config in providers.items():
            factory = ADAPTER_FACTORIES.get(name)
            if factory is None:
                raise ValueError(
                    f"Unsupported provider '{name}'. "
                    f"Supported providers: {', '.join(sorted(ADAPTER_FACTORIES))}"
                )
            if not config.is_complete:
                logger.info(f"Provider '{name}' has no client credentials, not registering it")
                continue
            if config.callback_path is None:
                config = config.model_copy(
                    update={"callback_path": f"{route_prefix.rstrip('/')}/{name}/callback"}
                )
            registry.register(factory(config, timeout))
        logger.info(f"Registered providers: {registry.names() or 'none'}")
        return registry

    def register(self, adapter: ProviderAdapter) -> None:
        if adapter.provider_name in self._adapters:
            logger.warning(f"Replacing already registered provider '{adapter.provider_name}'")
        self._adapters[adapter.provider_name] = adapter

    def get(self, name: str) -> ProviderAdapter:
        adapter = self._adapters.get(name)
        if adapter is None:
            raise UnknownProviderError(name)
        return adapter

    def names(self) -> list[str]:
        return list(self._adapters)

    def summaries(self) -> list[ProviderSummary]:
        return [adapter.descriptor.summary() for adapter in self._adapters.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._adapters

    def __iter__(self) -> Iterator[ProviderAdapter]:
        return iter(self._adapters.values())

    def __len__(self) -> int:
        return len(self._adapters)


__all__ = ["ADAPTER_FACTORIES", "ProviderRegistry"]
