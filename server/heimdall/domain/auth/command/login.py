"""Login commands for the OAuth authentication flow.

A login attempt is a two-phase state machine carried in a flow session:

    IDLE --InitiateLogin--> AWAITING_CALLBACK --CompleteOAuth--> COMPLETED | FAILED

The flow session is bound to the caller's browser by the HTTP layer and is
consumed exactly once by the callback, whatever its outcome.
"""

import hmac
import logging
import secrets
from typing import Literal
from urllib.parse import urlsplit

from pydantic import BaseModel

from heimdall.config import Config
from heimdall.domain.auth.model.flow import FlowPhase, FlowState
from heimdall.domain.auth.port.oauth_provider import OAuthProvider
from heimdall.domain.auth.port.provider_registry import ProviderRegistry
from heimdall.domain.auth.port.session_store import FlowSessionStore
from heimdall.domain.auth.service.auth import AuthService
from heimdall.domain.auth.service.token import TokenService
from heimdall.domain.auth.util.return_url import cookie_domain_for, validate_return_to
from heimdall.domain.shared.authorization.gate import public
from heimdall.domain.shared.command import Command, CommandHandler, Result
from heimdall.domain.shared.error import BadRequestError, HeimdallError

logger = logging.getLogger(__name__)

# 32 random bytes = 256 bits of entropy
CSRF_TOKEN_BYTES = 32


def resolve_provider(registry: ProviderRegistry, provider_id: str) -> OAuthProvider:
    """Look up a provider or fail with a caller-facing error."""
    provider = registry.get(provider_id)
    if provider is None:
        available = registry.available_providers()
        raise BadRequestError(
            f"Unknown provider: {provider_id}. Available: {', '.join(available) or 'none'}",
            code="unknown_provider",
        )
    return provider


def callback_url_for(app_url: str, provider: OAuthProvider) -> str:
    """The URL a provider redirects back to after the caller authenticates."""
    return f"{app_url.rstrip('/')}/oauth/callback/{provider.kind}/{provider.name}"


class InitiateLogin(Command):
    """Command to start OAuth login flow."""

    provider_id: str
    return_to: str | None = None  # Where to send the caller after login
    previous_session_key: str | None = None  # Flow session already bound to this browser


class InitiateLoginResult(Result):
    """Result containing the provider login URL and the new flow session key."""

    authorization_url: str
    session_key: str


class InitiateLoginHandler(CommandHandler[InitiateLogin, InitiateLoginResult]):
    """Handler for InitiateLogin command (IDLE -> AWAITING_CALLBACK)."""

    __auth__ = public()

    config: Config
    provider_registry: ProviderRegistry
    session_store: FlowSessionStore

    async def run(self, cmd: InitiateLogin) -> InitiateLoginResult:
        """Generate the provider login URL and store the CSRF token."""
        provider = resolve_provider(self.provider_registry, cmd.provider_id)

        # A fresh attempt always invalidates a stale one
        if cmd.previous_session_key:
            await self.session_store.discard(cmd.previous_session_key)

        return_to = validate_return_to(cmd.return_to, self.config.auth.allowed_returns)

        csrf_token = secrets.token_urlsafe(CSRF_TOKEN_BYTES)
        session = await self.session_store.new()
        session.state = FlowState(
            csrf_token=csrf_token,
            return_to=return_to,
            phase=FlowPhase.AWAITING_CALLBACK,
        )
        await self.session_store.save(session)

        authorization_url = provider.build_login_url(
            csrf_token, callback_url_for(self.config.app_url, provider)
        )

        logger.info(
            "OAuth login initiated: provider=%s, phase=%s",
            provider.name,
            FlowPhase.AWAITING_CALLBACK.value,
        )
        return InitiateLoginResult(
            authorization_url=authorization_url,
            session_key=session.key,
        )


class CompleteOAuth(Command):
    """Command to complete OAuth flow from the provider's callback."""

    provider_type: str
    provider_id: str
    state: str | None = None
    code: str | None = None
    error: str | None = None
    error_description: str | None = None
    session_key: str | None = None  # Flow session bound to this browser


class CredentialCookie(BaseModel):
    """How the session token is handed to the browser."""

    name: str
    value: str
    domain: str | None  # Return target's host; None = host-only cookie
    path: str = "/"
    max_age: int
    secure: bool
    httponly: bool = True
    samesite: Literal["lax", "strict", "none"] = "lax"


class CompleteOAuthResult(Result):
    """Result containing the authenticated account, its token and where to go next."""

    account_id: str
    provider: str
    external_id: str
    token: str
    return_to: str
    cookie: CredentialCookie


class CompleteOAuthHandler(CommandHandler[CompleteOAuth, CompleteOAuthResult]):
    """Handler for CompleteOAuth command (AWAITING_CALLBACK -> COMPLETED | FAILED)."""

    __auth__ = public()

    config: Config
    provider_registry: ProviderRegistry
    session_store: FlowSessionStore
    auth_service: AuthService
    token_service: TokenService

    async def run(self, cmd: CompleteOAuth) -> CompleteOAuthResult:
        """Verify the callback, authenticate the caller and build the credential cookie."""
        try:
            result = await self._complete(cmd)
        except HeimdallError as e:
            logger.warning(
                "OAuth callback failed: provider=%s, phase=%s, code=%s",
                cmd.provider_id,
                FlowPhase.FAILED.value,
                e.code,
            )
            raise
        finally:
            # Single use: success or failure, this attempt is over
            if cmd.session_key:
                await self.session_store.discard(cmd.session_key)

        logger.info(
            "OAuth login complete: account_id=%s, provider=%s, phase=%s",
            result.account_id,
            result.provider,
            FlowPhase.COMPLETED.value,
        )
        return result

    async def _complete(self, cmd: CompleteOAuth) -> CompleteOAuthResult:
        provider = resolve_provider(self.provider_registry, cmd.provider_id)
        if provider.kind != cmd.provider_type:
            raise BadRequestError(
                f"Provider {cmd.provider_id} is not of type {cmd.provider_type}",
                code="provider_type_mismatch",
            )

        if cmd.error:
            logger.warning(
                "OAuth provider returned an error: provider=%s, error=%s, description=%s",
                provider.name,
                cmd.error,
                cmd.error_description,
            )
            raise BadRequestError(cmd.error, code="provider_error")

        if not cmd.state:
            raise BadRequestError("State not found", code="missing_state")

        session = await self.session_store.load(cmd.session_key) if cmd.session_key else None
        if session is None or session.state is None:
            raise BadRequestError("No login in progress", code="missing_session")

        flow = session.state
        if flow.phase is not FlowPhase.AWAITING_CALLBACK or not hmac.compare_digest(
            flow.csrf_token.encode(), cmd.state.encode()
        ):
            raise BadRequestError("State mismatch", code="state_mismatch")

        if not cmd.code:
            raise BadRequestError("Code not found", code="missing_code")

        account, identity, token = await self.auth_service.complete_oauth(
            provider=provider,
            code=cmd.code,
            redirect_uri=callback_url_for(self.config.app_url, provider),
        )

        return_to = flow.return_to or "/"
        cookie = CredentialCookie(
            name=self.config.auth.cookie_name,
            value=token,
            domain=cookie_domain_for(return_to),
            max_age=self.token_service.valid_seconds,
            # Plain-http app URLs are local development; everything else is secure
            secure=urlsplit(self.config.app_url).scheme != "http",
        )

        return CompleteOAuthResult(
            account_id=str(account.id),
            provider=identity.provider,
            external_id=identity.external_id,
            token=token,
            return_to=return_to,
            cookie=cookie,
        )
