"""Account service: maps external identities onto local accounts."""

import logging

from heimdall.domain.auth.model.account import Account
from heimdall.domain.auth.model.external_identity import ExternalIdentity
from heimdall.domain.auth.model.value import AccountId
from heimdall.domain.auth.port.repository import AccountRepository
from heimdall.domain.shared.error import NotFoundError
from heimdall.domain.shared.service import Service

logger = logging.getLogger(__name__)


class AccountService(Service):
    """Account lookup and reconciliation.

    - reconcile: find, link or create the account for an external identity
    - get / get_by_provider: plain lookups for the account queries
    """

    _account_repo: AccountRepository

    async def reconcile(self, identity: ExternalIdentity) -> Account:
        """Map an external identity to a local account.

        Three steps, each short-circuiting on success:

        1. The account already linked to (provider, external_id), unchanged.
        2. An account with the identity's email, with the new provider linked.
        3. A new standard account linked to the identity.

        Only NotFoundError falls through to the next step. Any other failure
        propagates unchanged and aborts the reconciliation.

        The steps are not atomic. Two concurrent first logins for the same
        identity race on step 3; the store's unique constraint on
        (provider, external_id) rejects the loser with ConflictError.
        """
        try:
            return await self._account_repo.get_by_provider(
                identity.provider, identity.external_id
            )
        except NotFoundError:
            pass

        if identity.email:
            try:
                account = await self._account_repo.get_by_email(identity.email)
            except NotFoundError:
                pass
            else:
                return await self._link(account, identity)

        account = Account.create(identity)
        await self._account_repo.create(account)

        logger.info(
            "New account created: account_id=%s, provider=%s",
            account.id,
            identity.provider,
        )
        return account

    async def get(self, account_id: AccountId) -> Account:
        """Get an account by ID. Raises NotFoundError if missing."""
        return await self._account_repo.get(account_id)

    async def get_by_provider(self, provider: str, external_id: str) -> Account:
        """Get the account linked to a provider identity. Raises NotFoundError if missing."""
        return await self._account_repo.get_by_provider(provider, external_id)

    async def _link(self, account: Account, identity: ExternalIdentity) -> Account:
        provider_identity = identity.provider_identity
        account.link(provider_identity)
        await self._account_repo.add_provider(account.id, provider_identity)

        logger.info(
            "Provider linked to existing account: account_id=%s, provider=%s",
            account.id,
            identity.provider,
        )
        return account
