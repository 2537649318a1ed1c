"""Account routes: who am I, and account lookups."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from heimdall.domain.auth.query.get_account import (
    AccountDTO,
    GetAccount,
    GetAccountByProvider,
    GetAccountByProviderHandler,
    GetAccountHandler,
    GetCurrentAccount,
    GetCurrentAccountHandler,
)

router = APIRouter(prefix="/accounts", tags=["Accounts"], route_class=DishkaRoute)


@router.get("/me", response_model=AccountDTO)
async def get_current_account(handler: FromDishka[GetCurrentAccountHandler]) -> AccountDTO:
    """The account behind the presented token."""
    return await handler.run(GetCurrentAccount())


@router.get("/by-provider/{provider}/{external_id}", response_model=AccountDTO)
async def get_account_by_provider(
    provider: str,
    external_id: str,
    handler: FromDishka[GetAccountByProviderHandler],
) -> AccountDTO:
    """The account linked to a provider identity. Requires the administrator role."""
    return await handler.run(GetAccountByProvider(provider=provider, external_id=external_id))


@router.get("/{account_id}", response_model=AccountDTO)
async def get_account(
    account_id: str,
    handler: FromDishka[GetAccountHandler],
) -> AccountDTO:
    """An account by id. Callers may read their own account; administrators any."""
    return await handler.run(GetAccount(account_id=account_id))
