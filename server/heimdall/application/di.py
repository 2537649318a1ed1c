from collections.abc import Sequence

from dishka import AsyncContainer, Provider, from_context, make_async_container

from heimdall.config import Config
from heimdall.domain.auth.util.di import AuthProvider
from heimdall.infrastructure.auth import AuthInfraProvider
from heimdall.infrastructure.persistence import PersistenceProvider
from heimdall.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(
    config: Config | None = None,
    overrides: Sequence[Provider] = (),
) -> AsyncContainer:
    """Build the application container.

    Providers passed in ``overrides`` are registered last, so they replace
    any earlier factory for the same type (used by tests to swap adapters).
    """
    # Pydantic Settings populates from env vars at runtime
    if config is None:
        config = Config()  # type: ignore[call-arg]

    return make_async_container(
        ConfigProvider(),
        PersistenceProvider(),
        AuthProvider(),
        AuthInfraProvider(),
        *overrides,
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
