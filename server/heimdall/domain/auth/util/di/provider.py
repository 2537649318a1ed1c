"""DI provider for auth domain."""

import logging

from dishka import from_context, provide
from starlette.requests import Request

from heimdall.config import Config
from heimdall.domain.auth.command.login import CompleteOAuthHandler, InitiateLoginHandler
from heimdall.domain.auth.model.identity import Identity
from heimdall.domain.auth.port.repository import AccountRepository
from heimdall.domain.auth.query.get_account import (
    GetAccountByProviderHandler,
    GetAccountHandler,
    GetCurrentAccountHandler,
)
from heimdall.domain.auth.service.account import AccountService
from heimdall.domain.auth.service.auth import AuthService
from heimdall.domain.auth.service.token import TokenService
from heimdall.domain.shared.port import UnitOfWork
from heimdall.util.di.base import Provider
from heimdall.util.di.scope import Scope

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_token(request: Request, cookie_name: str) -> str | None:
    """Find the session token on a request.

    The Authorization header wins over the credential cookie, so API clients
    are never shadowed by a stale browser cookie.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith(BEARER_PREFIX):
        return auth_header[len(BEARER_PREFIX) :].strip() or None
    return request.cookies.get(cookie_name) or None


class AuthProvider(Provider):
    """DI provider for auth domain services and handlers."""

    request = from_context(provides=Request, scope=Scope.UOW)

    # Command Handlers
    initiate_login_handler = provide(InitiateLoginHandler, scope=Scope.UOW)
    complete_oauth_handler = provide(CompleteOAuthHandler, scope=Scope.UOW)

    # Query Handlers
    get_current_account_handler = provide(GetCurrentAccountHandler, scope=Scope.UOW)
    get_account_handler = provide(GetAccountHandler, scope=Scope.UOW)
    get_account_by_provider_handler = provide(GetAccountByProviderHandler, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_token_service(self, config: Config) -> TokenService:
        """Provide TokenService. Keys are parsed once per application."""
        token_service = TokenService(_config=config.auth.token)
        if not token_service.can_issue:
            logger.warning("No usable signing key configured: logins will fail, verification works")
        return token_service

    @provide(scope=Scope.UOW)
    def get_account_service(self, account_repo: AccountRepository) -> AccountService:
        return AccountService(_account_repo=account_repo)

    @provide(scope=Scope.UOW)
    def get_auth_service(
        self,
        account_service: AccountService,
        token_service: TokenService,
        unit_of_work: UnitOfWork,
    ) -> AuthService:
        return AuthService(
            _account_service=account_service,
            _token_service=token_service,
            _unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.UOW)
    def get_identity(
        self,
        request: Request,
        config: Config,
        auth_service: AuthService,
    ) -> Identity:
        """Resolve Identity from the Bearer header or the credential cookie.

        Returns Anonymous for unauthenticated requests, Principal for authenticated.
        """
        identity = auth_service.authenticate(extract_token(request, config.auth.cookie_name))
        logger.debug("Identity resolved: %s", identity)
        return identity
