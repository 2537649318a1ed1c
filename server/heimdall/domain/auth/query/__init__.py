"""Auth domain queries."""

from .get_account import (
    AccountDTO,
    GetAccount,
    GetAccountByProvider,
    GetAccountByProviderHandler,
    GetAccountHandler,
    GetCurrentAccount,
    GetCurrentAccountHandler,
    LinkedProviderDTO,
)

__all__ = [
    "AccountDTO",
    "GetAccount",
    "GetAccountByProvider",
    "GetAccountByProviderHandler",
    "GetAccountHandler",
    "GetCurrentAccount",
    "GetCurrentAccountHandler",
    "LinkedProviderDTO",
]
