"""Auth service for orchestrating authentication flows."""

import logging

from heimdall.domain.auth.model.account import Account
from heimdall.domain.auth.model.external_identity import ExternalIdentity
from heimdall.domain.auth.model.identity import Anonymous, Identity
from heimdall.domain.auth.model.principal import Principal
from heimdall.domain.auth.port.oauth_provider import OAuthProvider
from heimdall.domain.auth.service.account import AccountService
from heimdall.domain.auth.service.token import TokenService
from heimdall.domain.shared.error import InvalidTokenError
from heimdall.domain.shared.port import UnitOfWork
from heimdall.domain.shared.service import Service

logger = logging.getLogger(__name__)


class AuthService(Service):
    """Orchestrates authentication.

    - complete_oauth: exchange code, reconcile account, issue token
    - authenticate: resolve the identity behind a presented token
    """

    _account_service: AccountService
    _token_service: TokenService
    _unit_of_work: UnitOfWork

    async def complete_oauth(
        self,
        provider: OAuthProvider,
        code: str,
        redirect_uri: str,
    ) -> tuple[Account, ExternalIdentity, str]:
        """Complete the OAuth exchange and issue a session token.

        Args:
            provider: The OAuth provider
            code: Authorization code from callback
            redirect_uri: Must match the one used in the login URL

        Returns:
            Tuple of (account, external identity, session token)

        Raises:
            ProviderError: If the provider exchange fails
            StorageUnavailableError: If the reconciled account cannot be committed
            SigningError: If the token cannot be signed
        """
        identity, _raw = await provider.exchange_code_for_user(code, redirect_uri)

        account = await self._account_service.reconcile(identity)
        # A credential must never name an account that is not stored yet
        await self._unit_of_work.commit()

        token = self._token_service.issue(account)

        logger.info(
            "Account authenticated: account_id=%s, provider=%s, external_id=%s",
            account.id,
            identity.provider,
            identity.external_id,
        )

        return account, identity, token

    def authenticate(self, token: str | None) -> Identity:
        """Resolve the request identity from a session token.

        Missing or invalid tokens yield Anonymous; callers that need a
        principal enforce that through their handler gate.
        """
        if not token:
            return Anonymous()
        try:
            claims = self._token_service.verify(token)
        except InvalidTokenError:
            return Anonymous()
        return Principal.from_claims(claims)
