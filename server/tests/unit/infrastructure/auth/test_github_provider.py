"""Unit tests for the GitHub OAuth adapter."""

from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from heimdall.config import GithubConfig
from heimdall.domain.shared.error import ProviderError
from heimdall.infrastructure.auth.github import GithubOAuthProvider

REDIRECT_URI = "https://auth.example.com/oauth/callback/github/github"


def make_provider(http_client: AsyncMock | None = None) -> GithubOAuthProvider:
    config = GithubConfig(client_id="gh-client", client_secret="gh-secret")
    return GithubOAuthProvider(
        config=config,
        http_client=http_client or AsyncMock(spec=httpx.AsyncClient),
    )


def token_response(**body) -> httpx.Response:
    return httpx.Response(200, json=body or {"access_token": "gho_abc", "token_type": "bearer"})


class TestBuildLoginUrl:
    def test_url_carries_client_state_scope_and_redirect(self):
        url = make_provider().build_login_url("csrf-123", REDIRECT_URI)

        parts = urlsplit(url)
        params = parse_qs(parts.query)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
            "https://github.com/login/oauth/authorize"
        )
        assert params["client_id"] == ["gh-client"]
        assert params["state"] == ["csrf-123"]
        assert params["redirect_uri"] == [REDIRECT_URI]
        assert params["scope"] == ["read:user user:email"]

    def test_kind_and_name(self):
        provider = make_provider()

        assert provider.kind == "github"
        assert provider.name == "github"


class TestExchangeCodeForUser:
    @pytest.mark.asyncio
    async def test_public_email_profile(self):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.post.return_value = token_response()
        http.get.return_value = httpx.Response(
            200,
            json={"id": 583231, "login": "octocat", "name": "The Octocat", "email": "o@x.org"},
        )

        identity, raw = await make_provider(http).exchange_code_for_user("code-1", REDIRECT_URI)

        assert identity.provider == "github"
        assert identity.external_id == "583231"
        assert identity.email == "o@x.org"
        assert identity.display_name == "The Octocat"
        assert raw["login"] == "octocat"
        assert http.get.await_count == 1

        post_kwargs = http.post.call_args.kwargs
        assert post_kwargs["data"]["code"] == "code-1"
        assert post_kwargs["data"]["redirect_uri"] == REDIRECT_URI
        assert post_kwargs["headers"]["Accept"] == "application/json"

        get_kwargs = http.get.call_args.kwargs
        assert get_kwargs["headers"]["Authorization"] == "Bearer gho_abc"

    @pytest.mark.asyncio
    async def test_private_email_falls_back_to_primary_verified(self):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.post.return_value = token_response()
        http.get.side_effect = [
            httpx.Response(200, json={"id": 583231, "login": "octocat", "name": None, "email": None}),
            httpx.Response(
                200,
                json=[
                    {"email": "old@x.org", "primary": False, "verified": True},
                    {"email": "unverified@x.org", "primary": True, "verified": False},
                    {"email": "main@x.org", "primary": True, "verified": True},
                ],
            ),
        ]

        identity, _ = await make_provider(http).exchange_code_for_user("code-1", REDIRECT_URI)

        assert identity.email == "main@x.org"
        assert identity.display_name == "octocat"
        assert http.get.call_args.args[0] == "https://api.github.com/user/emails"

    @pytest.mark.asyncio
    async def test_no_verified_primary_email_means_no_email(self):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.post.return_value = token_response()
        http.get.side_effect = [
            httpx.Response(200, json={"id": 1, "login": "ghost", "email": None}),
            httpx.Response(200, json=[{"email": "x@x.org", "primary": True, "verified": False}]),
        ]

        identity, _ = await make_provider(http).exchange_code_for_user("code-1", REDIRECT_URI)

        assert identity.email is None

    @pytest.mark.asyncio
    async def test_rejected_code_is_provider_error(self):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.post.return_value = httpx.Response(
            200,
            json={
                "error": "bad_verification_code",
                "error_description": "The code passed is incorrect or expired.",
            },
        )

        with pytest.raises(ProviderError) as exc_info:
            await make_provider(http).exchange_code_for_user("stale", REDIRECT_URI)

        assert exc_info.value.message == "The code passed is incorrect or expired."
        http.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_token_endpoint_failure_is_provider_error(self):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.post.return_value = httpx.Response(503, text="unavailable")

        with pytest.raises(ProviderError):
            await make_provider(http).exchange_code_for_user("code-1", REDIRECT_URI)

    @pytest.mark.asyncio
    async def test_network_failure_is_provider_error(self):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(ProviderError) as exc_info:
            await make_provider(http).exchange_code_for_user("code-1", REDIRECT_URI)

        assert exc_info.value.code == "idp_unavailable"

    @pytest.mark.asyncio
    async def test_profile_failure_is_provider_error(self):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.post.return_value = token_response()
        http.get.return_value = httpx.Response(401, json={"message": "Bad credentials"})

        with pytest.raises(ProviderError):
            await make_provider(http).exchange_code_for_user("code-1", REDIRECT_URI)

    @pytest.mark.asyncio
    async def test_profile_without_id_is_provider_error(self):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.post.return_value = token_response()
        http.get.return_value = httpx.Response(200, json={"login": "octocat"})

        with pytest.raises(ProviderError):
            await make_provider(http).exchange_code_for_user("code-1", REDIRECT_URI)
