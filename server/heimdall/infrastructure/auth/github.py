"""GitHub OAuth provider adapter."""

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from heimdall.config import GithubConfig
from heimdall.domain.auth.model.external_identity import ExternalIdentity
from heimdall.domain.auth.port.oauth_provider import OAuthProvider
from heimdall.domain.shared.error import ProviderError

logger = logging.getLogger(__name__)

_API_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}


class GithubOAuthProvider(OAuthProvider):
    """OAuthProvider implementation for GitHub OAuth apps."""

    def __init__(self, config: GithubConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def kind(self) -> str:
        return "github"

    @property
    def name(self) -> str:
        return self._config.name

    def build_login_url(self, csrf_token: str, redirect_uri: str) -> str:
        """Generate GitHub authorization URL."""
        params = {
            "client_id": self._config.client_id,
            "redirect_uri": redirect_uri,
            "scope": "read:user user:email",
            "state": csrf_token,
            "allow_signup": "true",
        }
        return f"{self._config.base_url}/login/oauth/authorize?{urlencode(params)}"

    async def exchange_code_for_user(
        self,
        code: str,
        redirect_uri: str,
    ) -> tuple[ExternalIdentity, dict[str, Any]]:
        """Exchange authorization code for the GitHub user behind it."""
        access_token = await self._exchange_code(code, redirect_uri)
        user = await self._get_json("/user", access_token)

        user_id = user.get("id")
        if user_id is None:
            raise ProviderError("GitHub response missing user id", code="oauth_error")

        email = user.get("email") or await self._primary_email(access_token)

        identity = ExternalIdentity(
            provider=self.kind,
            external_id=str(user_id),
            email=email,
            display_name=user.get("name") or user.get("login"),
        )
        return identity, user

    async def _exchange_code(self, code: str, redirect_uri: str) -> str:
        data = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
        }

        try:
            response = await self._http.post(
                f"{self._config.base_url}/login/oauth/access_token",
                data=data,
                headers={"Accept": "application/json"},
            )
        except httpx.RequestError as e:
            logger.exception("GitHub request failed: %s", e)
            raise ProviderError("Failed to connect to GitHub", code="idp_unavailable") from e

        if response.status_code != 200:
            logger.error(
                "GitHub token exchange failed: status=%d, body=%s",
                response.status_code,
                response.text,
            )
            raise ProviderError(
                f"GitHub token exchange failed: {response.status_code}",
                code="idp_unavailable",
            )

        # GitHub reports a rejected code as 200 with an error body
        token_data = response.json()
        if "error" in token_data:
            raise ProviderError(
                token_data.get("error_description") or token_data["error"],
                code="oauth_error",
            )

        access_token = token_data.get("access_token")
        if not access_token:
            raise ProviderError("GitHub response missing access_token", code="oauth_error")
        return access_token

    async def _get_json(self, path: str, access_token: str) -> Any:
        try:
            response = await self._http.get(
                f"{self._config.api_url}{path}",
                headers={**_API_HEADERS, "Authorization": f"Bearer {access_token}"},
            )
        except httpx.RequestError as e:
            logger.exception("GitHub request failed: %s", e)
            raise ProviderError("Failed to connect to GitHub", code="idp_unavailable") from e

        if response.status_code != 200:
            logger.error(
                "GitHub API call failed: path=%s, status=%d, body=%s",
                path,
                response.status_code,
                response.text,
            )
            raise ProviderError(
                f"GitHub API call failed: {response.status_code}",
                code="idp_unavailable",
            )
        return response.json()

    async def _primary_email(self, access_token: str) -> str | None:
        """Primary verified address, used when the profile email is private."""
        emails = await self._get_json("/user/emails", access_token)
        for entry in emails:
            if entry.get("primary") and entry.get("verified"):
                return entry.get("email")
        return None
