import logging
from contextlib import asynccontextmanager

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from heimdall.application.api.v1.errors import error_response
from heimdall.application.api.v1.routes import accounts, health, oauth
from heimdall.application.di import create_container
from heimdall.config import Config, configure_logging
from heimdall.domain.auth.service.token import TokenService
from heimdall.domain.shared.authorization.startup import validate_all_handlers
from heimdall.domain.shared.error import HeimdallError
from heimdall.infrastructure.persistence.database import create_tables
from heimdall.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: AsyncContainer = app.state.dishka_container
    config = await container.get(Config)

    # Fail fast on unusable key material rather than on the first request
    await container.get(TokenService)

    if config.database.auto_create:
        await create_tables(await container.get(AsyncEngine))

    yield

    await container.close()


def create_app(config: Config | None = None, container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    if config is None:
        config = Config()  # type: ignore[call-arg]

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting %s server v%s", config.server.name, config.server.version)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Traces are only exported when a Logfire token is present in the environment
    logfire.configure(
        service_name=config.server.name.lower(),
        service_version=config.server.version,
        send_to_logfire="if-token-present",
        console=False,
    )
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    # Setup dependency injection
    setup_dishka(container or create_container(config), app_instance)

    app_instance.include_router(oauth.router)
    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(accounts.router, prefix="/api/v1")

    # Validate all handlers have authorization declarations (fail fast)
    validate_all_handlers()

    # Heimdall errors carry their own status; internal ones are redacted
    @app_instance.exception_handler(HeimdallError)
    async def heimdall_error_handler(request: Request, exc: HeimdallError):
        return error_response(exc)

    # Anything else is an internal error with a correlation id
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s", request.method, request.url.path)
        return error_response(exc)

    return app_instance
