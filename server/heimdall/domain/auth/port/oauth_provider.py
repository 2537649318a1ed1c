"""OAuth provider port for the auth domain."""

from abc import abstractmethod
from typing import Any, Protocol

from heimdall.domain.auth.model.external_identity import ExternalIdentity
from heimdall.domain.shared.port import Port


class OAuthProvider(Port, Protocol):
    """Port for third-party OAuth providers.

    Implementations are adapters in infrastructure/ (e.g., GithubOAuthProvider).
    Each one speaks its provider's dialect of the authorization-code flow.
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        """Stable provider-kind identifier (e.g., 'github')."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier used in login/callback URLs and registry lookups."""
        ...

    @abstractmethod
    def build_login_url(self, csrf_token: str, redirect_uri: str) -> str:
        """Build the authorization-request URL to send the caller to.

        Args:
            csrf_token: Single-use state value (stored in the flow session)
            redirect_uri: Where the provider should redirect after auth

        Returns:
            Full URL to redirect the user to
        """
        ...

    @abstractmethod
    async def exchange_code_for_user(
        self,
        code: str,
        redirect_uri: str,
    ) -> tuple[ExternalIdentity, dict[str, Any]]:
        """Exchange an authorization code and fetch the caller's profile.

        Args:
            code: Authorization code from the provider callback
            redirect_uri: Must match the redirect_uri used in the login URL

        Returns:
            The external identity and the provider's raw profile payload

        Raises:
            ProviderError: On network failure, provider-side error or a
                malformed response
        """
        ...
