"""Repository ports for the auth domain."""

from abc import abstractmethod
from typing import Protocol

from heimdall.domain.auth.model.account import Account
from heimdall.domain.auth.model.value import AccountId, ProviderIdentity
from heimdall.domain.shared.port import Port


class AccountRepository(Port, Protocol):
    """Repository for Account aggregate persistence.

    Lookups raise NotFoundError on a miss. Any other exception means the store
    itself failed.
    """

    @abstractmethod
    async def get(self, account_id: AccountId) -> Account:
        """Get an account by ID."""
        ...

    @abstractmethod
    async def get_by_provider(self, provider: str, external_id: str) -> Account:
        """Get the account linked to a provider identity."""
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Account:
        """Get an account by email.

        Email is not unique; when several accounts share one, the oldest wins.
        """
        ...

    @abstractmethod
    async def create(self, account: Account) -> None:
        """Insert a new account with its provider linkages.

        Raises:
            ConflictError: If one of its provider identities is already linked.
        """
        ...

    @abstractmethod
    async def add_provider(self, account_id: AccountId, identity: ProviderIdentity) -> None:
        """Append a provider linkage to an existing account.

        Raises:
            ConflictError: If the provider identity is already linked.
        """
        ...
