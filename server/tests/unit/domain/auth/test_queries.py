"""Unit tests for account query handlers."""

from unittest.mock import AsyncMock

import pytest

from heimdall.domain.auth.model.account import Account
from heimdall.domain.auth.model.external_identity import ExternalIdentity
from heimdall.domain.auth.model.identity import Anonymous
from heimdall.domain.auth.model.principal import Principal
from heimdall.domain.auth.model.role import Role
from heimdall.domain.auth.model.value import AccountId
from heimdall.domain.auth.query.get_account import (
    GetAccount,
    GetAccountByProvider,
    GetAccountByProviderHandler,
    GetAccountHandler,
    GetCurrentAccount,
    GetCurrentAccountHandler,
)
from heimdall.domain.shared.error import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
)


def make_account() -> Account:
    return Account.create(
        ExternalIdentity(
            provider="github",
            external_id="583231",
            email="octocat@example.com",
            display_name="The Octocat",
        )
    )


def make_account_service(account: Account) -> AsyncMock:
    service = AsyncMock()
    service.get.return_value = account
    service.get_by_provider.return_value = account
    return service


class TestGetCurrentAccount:
    @pytest.mark.asyncio
    async def test_returns_callers_account(self):
        account = make_account()
        service = make_account_service(account)
        handler = GetCurrentAccountHandler(
            principal=Principal(account_id=account.id, role=Role.STANDARD),
            account_service=service,
        )

        result = await handler.run(GetCurrentAccount())

        assert result.id == str(account.id)
        assert result.role == "standard"
        assert [(p.provider, p.external_id) for p in result.providers] == [("github", "583231")]
        service.get.assert_awaited_once_with(account.id)

    @pytest.mark.asyncio
    async def test_anonymous_caller_is_unauthenticated(self):
        handler = GetCurrentAccountHandler(
            principal=Anonymous(),
            account_service=make_account_service(make_account()),
        )

        with pytest.raises(AuthenticationError):
            await handler.run(GetCurrentAccount())


class TestGetAccount:
    @pytest.mark.asyncio
    async def test_account_may_read_itself(self):
        account = make_account()
        handler = GetAccountHandler(
            principal=Principal(account_id=account.id, role=Role.STANDARD),
            account_service=make_account_service(account),
        )

        result = await handler.run(GetAccount(account_id=str(account.id)))

        assert result.id == str(account.id)

    @pytest.mark.asyncio
    async def test_standard_account_may_not_read_others(self):
        account = make_account()
        service = make_account_service(account)
        handler = GetAccountHandler(
            principal=Principal(account_id=AccountId.generate(), role=Role.STANDARD),
            account_service=service,
        )

        with pytest.raises(AuthorizationError):
            await handler.run(GetAccount(account_id=str(account.id)))

        service.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_administrator_may_read_anyone(self):
        account = make_account()
        handler = GetAccountHandler(
            principal=Principal(account_id=AccountId.generate(), role=Role.ADMINISTRATOR),
            account_service=make_account_service(account),
        )

        result = await handler.run(GetAccount(account_id=str(account.id)))

        assert result.id == str(account.id)

    @pytest.mark.asyncio
    async def test_malformed_id_is_bad_request(self):
        handler = GetAccountHandler(
            principal=Principal(account_id=AccountId.generate(), role=Role.ADMINISTRATOR),
            account_service=make_account_service(make_account()),
        )

        with pytest.raises(BadRequestError):
            await handler.run(GetAccount(account_id="not-a-uuid"))


class TestGetAccountByProvider:
    @pytest.mark.asyncio
    async def test_administrator_only(self):
        handler = GetAccountByProviderHandler(
            principal=Principal(account_id=AccountId.generate(), role=Role.STANDARD),
            account_service=make_account_service(make_account()),
        )

        with pytest.raises(AuthorizationError):
            await handler.run(GetAccountByProvider(provider="github", external_id="583231"))

    @pytest.mark.asyncio
    async def test_administrator_gets_linked_account(self):
        account = make_account()
        service = make_account_service(account)
        handler = GetAccountByProviderHandler(
            principal=Principal(account_id=AccountId.generate(), role=Role.ADMINISTRATOR),
            account_service=service,
        )

        result = await handler.run(GetAccountByProvider(provider="github", external_id="583231"))

        assert result.id == str(account.id)
        service.get_by_provider.assert_awaited_once_with("github", "583231")
