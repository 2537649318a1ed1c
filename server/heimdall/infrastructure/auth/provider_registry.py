"""Provider registry implementation."""

from heimdall.domain.auth.port.oauth_provider import OAuthProvider
from heimdall.domain.auth.port.provider_registry import ProviderRegistry
from heimdall.domain.shared.error import ConfigurationError


class InMemoryProviderRegistry(ProviderRegistry):
    """Mapping of provider identifiers to their adapters, filled at startup via DI."""

    def __init__(self, providers: list[OAuthProvider] | None = None) -> None:
        self._providers: dict[str, OAuthProvider] = {}
        for provider in providers or []:
            self.register(provider)

    def get(self, provider_id: str) -> OAuthProvider | None:
        return self._providers.get(provider_id)

    def available_providers(self) -> list[str]:
        return list(self._providers.keys())

    def register(self, provider: OAuthProvider) -> None:
        """Register a provider under its identifier.

        Raises:
            ConfigurationError: If another provider already uses the identifier
        """
        if provider.name in self._providers:
            raise ConfigurationError(
                f"Duplicate provider identifier: {provider.name}",
                code="duplicate_provider",
            )
        self._providers[provider.name] = provider
