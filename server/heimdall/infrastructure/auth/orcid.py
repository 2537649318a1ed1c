"""ORCiD OAuth provider adapter."""

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from heimdall.config import OrcidConfig
from heimdall.domain.auth.model.external_identity import ExternalIdentity
from heimdall.domain.auth.port.oauth_provider import OAuthProvider
from heimdall.domain.shared.error import ProviderError

logger = logging.getLogger(__name__)


class OrcidOAuthProvider(OAuthProvider):
    """OAuthProvider implementation for ORCiD.

    ORCiD returns the authenticated iD and name in the token response itself,
    so no profile call is needed. It never returns an email, so ORCiD
    identities are never linked to existing accounts by email.
    """

    def __init__(self, config: OrcidConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    @property
    def kind(self) -> str:
        return "orcid"

    @property
    def name(self) -> str:
        return self._config.name

    def build_login_url(self, csrf_token: str, redirect_uri: str) -> str:
        params = {
            "client_id": self._config.client_id,
            "response_type": "code",
            "scope": "/authenticate",
            "redirect_uri": redirect_uri,
            "state": csrf_token,
        }
        return f"{self._config.base_url}/oauth/authorize?{urlencode(params)}"

    async def exchange_code_for_user(
        self,
        code: str,
        redirect_uri: str,
    ) -> tuple[ExternalIdentity, dict[str, Any]]:
        data = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }

        try:
            response = await self._http.post(
                f"{self._config.base_url}/oauth/token",
                data=data,
                headers={"Accept": "application/json"},
            )
        except httpx.RequestError as e:
            logger.exception("ORCiD request failed: %s", e)
            raise ProviderError("Failed to connect to ORCiD", code="idp_unavailable") from e

        if response.status_code != 200:
            logger.error(
                "ORCiD token exchange failed: status=%d, body=%s",
                response.status_code,
                response.text,
            )
            raise ProviderError(
                f"ORCiD token exchange failed: {response.status_code}",
                code="idp_unavailable",
            )

        # {"access_token": ..., "token_type": "bearer", "name": ..., "orcid": "0000-..."}
        token_data = response.json()
        orcid_id = token_data.get("orcid")
        if not orcid_id:
            raise ProviderError("ORCiD response missing orcid field", code="oauth_error")

        # The access token is not needed past this point
        profile = {k: v for k, v in token_data.items() if k not in ("access_token", "refresh_token")}
        identity = ExternalIdentity(
            provider=self.kind,
            external_id=orcid_id,
            email=None,
            display_name=token_data.get("name"),
        )
        return identity, profile
