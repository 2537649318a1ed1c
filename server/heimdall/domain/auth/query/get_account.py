"""Account queries: who am I, and account lookup by id or provider identity."""

from datetime import datetime

from pydantic import BaseModel

from heimdall.domain.auth.model.account import Account
from heimdall.domain.auth.model.identity import Identity
from heimdall.domain.auth.model.principal import Principal
from heimdall.domain.auth.model.role import Role
from heimdall.domain.auth.model.value import AccountId
from heimdall.domain.auth.service.account import AccountService
from heimdall.domain.shared.authorization.gate import at_least
from heimdall.domain.shared.error import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
)
from heimdall.domain.shared.query import Query, QueryHandler
from heimdall.domain.shared.query import Result as QueryResult


class LinkedProviderDTO(BaseModel):
    provider: str
    external_id: str


class AccountDTO(QueryResult):
    id: str
    display_name: str | None
    email: str | None
    role: str
    providers: list[LinkedProviderDTO]
    created_at: datetime
    updated_at: datetime | None

    @classmethod
    def from_account(cls, account: Account) -> "AccountDTO":
        return cls(
            id=str(account.id),
            display_name=account.display_name,
            email=account.email,
            role=str(account.role),
            providers=[
                LinkedProviderDTO(provider=p.provider, external_id=p.external_id)
                for p in account.providers
            ],
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


def _require_principal(identity: Identity) -> Principal:
    if isinstance(identity, Principal):
        return identity
    raise AuthenticationError("Authentication required", code="missing_token")


class GetCurrentAccount(Query):
    """Query for the account behind the presented token."""


class GetCurrentAccountHandler(QueryHandler[GetCurrentAccount, AccountDTO]):
    __auth__ = at_least(Role.STANDARD)
    principal: Identity
    account_service: AccountService

    async def run(self, query: GetCurrentAccount) -> AccountDTO:
        principal = _require_principal(self.principal)
        account = await self.account_service.get(principal.account_id)
        return AccountDTO.from_account(account)


class GetAccount(Query):
    """Query for one account by id. Callers may read themselves; administrators anyone."""

    account_id: str  # UUID as string from API


class GetAccountHandler(QueryHandler[GetAccount, AccountDTO]):
    __auth__ = at_least(Role.STANDARD)
    principal: Identity
    account_service: AccountService

    async def run(self, query: GetAccount) -> AccountDTO:
        principal = _require_principal(self.principal)
        try:
            account_id = AccountId.parse(query.account_id)
        except ValueError as e:
            raise BadRequestError(
                f"Invalid account id: {query.account_id}", code="invalid_account_id"
            ) from e

        if not principal.is_account(account_id) and not principal.has_role(Role.ADMINISTRATOR):
            raise AuthorizationError(
                "Access denied: accounts may only read themselves", code="access_denied"
            )

        account = await self.account_service.get(account_id)
        return AccountDTO.from_account(account)


class GetAccountByProvider(Query):
    """Query for the account linked to a provider identity (administrators only)."""

    provider: str
    external_id: str


class GetAccountByProviderHandler(QueryHandler[GetAccountByProvider, AccountDTO]):
    __auth__ = at_least(Role.ADMINISTRATOR)
    principal: Identity
    account_service: AccountService

    async def run(self, query: GetAccountByProvider) -> AccountDTO:
        account = await self.account_service.get_by_provider(query.provider, query.external_id)
        return AccountDTO.from_account(account)
