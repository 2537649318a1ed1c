"""Provider registry port for the auth domain."""

from abc import abstractmethod
from typing import Protocol

from heimdall.domain.auth.port.oauth_provider import OAuthProvider
from heimdall.domain.shared.port import Port


class ProviderRegistry(Port, Protocol):
    """Registry of configured OAuth providers, keyed by provider identifier."""

    @abstractmethod
    def get(self, provider_id: str) -> OAuthProvider | None:
        """Get a provider by identifier, or None if it is not configured."""
        ...

    @abstractmethod
    def available_providers(self) -> list[str]:
        """Identifiers of all configured providers."""
        ...

    def is_available(self, provider_id: str) -> bool:
        return provider_id in self.available_providers()
