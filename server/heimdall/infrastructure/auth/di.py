"""DI provider for auth infrastructure."""

import logging
from collections.abc import AsyncIterable

import httpx
from dishka import provide
from sqlalchemy.ext.asyncio import AsyncSession

from heimdall.config import Config
from heimdall.domain.auth.port.oauth_provider import OAuthProvider
from heimdall.domain.auth.port.provider_registry import ProviderRegistry
from heimdall.domain.auth.port.session_store import FlowSessionStore
from heimdall.infrastructure.auth.github import GithubOAuthProvider
from heimdall.infrastructure.auth.orcid import OrcidOAuthProvider
from heimdall.infrastructure.auth.provider_registry import InMemoryProviderRegistry
from heimdall.infrastructure.auth.session_store import InMemoryFlowSessionStore
from heimdall.infrastructure.persistence.repository.flow_session import SqlFlowSessionStore
from heimdall.util.di.base import Provider
from heimdall.util.di.scope import Scope

logger = logging.getLogger(__name__)

# HTTP client timeout configuration
_HTTP_TIMEOUT = httpx.Timeout(
    connect=5.0,  # Connection timeout
    read=10.0,  # Read timeout
    write=5.0,  # Write timeout
    pool=5.0,  # Pool timeout
)


def build_providers(config: Config, http_client: httpx.AsyncClient) -> list[OAuthProvider]:
    """Adapters for every provider with a configured client id."""
    providers: list[OAuthProvider] = []
    if config.auth.github.client_id:
        providers.append(GithubOAuthProvider(config=config.auth.github, http_client=http_client))
    if config.auth.orcid.client_id:
        providers.append(OrcidOAuthProvider(config=config.auth.orcid, http_client=http_client))
    return providers


class AuthInfraProvider(Provider):
    """DI provider for auth infrastructure adapters."""

    @provide(scope=Scope.APP)
    async def get_auth_http_client(self) -> AsyncIterable[httpx.AsyncClient]:
        """Shared HTTP client for provider calls (connection pooling)."""
        async with httpx.AsyncClient(timeout=_HTTP_TIMEOUT) as client:
            yield client

    @provide(scope=Scope.APP)
    def get_provider_registry(
        self, config: Config, http_client: httpx.AsyncClient
    ) -> ProviderRegistry:
        """Provide ProviderRegistry with configured OAuth providers."""
        registry = InMemoryProviderRegistry(build_providers(config, http_client))
        if not registry.available_providers():
            logger.warning("No OAuth providers configured: every login will be rejected")
        else:
            logger.info("OAuth providers: %s", ", ".join(registry.available_providers()))
        return registry

    @provide(scope=Scope.APP)
    def get_memory_session_store(self, config: Config) -> InMemoryFlowSessionStore:
        return InMemoryFlowSessionStore(config.auth.session)

    @provide(scope=Scope.UOW)
    def get_flow_session_store(
        self,
        config: Config,
        memory_store: InMemoryFlowSessionStore,
        session: AsyncSession,
    ) -> FlowSessionStore:
        """Pick the flow session backend from configuration."""
        if config.auth.session.backend == "memory":
            return memory_store
        return SqlFlowSessionStore(session, config.auth.session)
