"""SQL repository implementation for accounts."""

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from heimdall.domain.auth.model.account import Account
from heimdall.domain.auth.model.role import Role
from heimdall.domain.auth.model.value import AccountId, ProviderIdentity
from heimdall.domain.auth.port.repository import AccountRepository
from heimdall.domain.shared.error import ConflictError, NotFoundError, StorageUnavailableError
from heimdall.infrastructure.persistence.tables import (
    account_providers_table,
    accounts_table,
)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on the way back; every stored timestamp is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _row_to_account(row: dict, providers: list[ProviderIdentity]) -> Account:
    """Convert a database row plus its linkages to an Account model."""
    return Account(
        id=AccountId(UUID(row["id"])),
        display_name=row["display_name"],
        email=row["email"],
        role=Role.from_name(row["role"]),
        providers=providers,
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
    )


def _account_to_dict(account: Account) -> dict:
    """Convert an Account model to a database row dict."""
    return {
        "id": str(account.id),
        "display_name": account.display_name,
        "email": account.email,
        "role": str(account.role),
        "created_at": account.created_at,
        "updated_at": account.updated_at,
    }


def _provider_to_dict(account_id: AccountId, identity: ProviderIdentity) -> dict:
    return {
        "account_id": str(account_id),
        "provider": identity.provider,
        "external_id": identity.external_id,
        "created_at": datetime.now(UTC),
    }


class SqlAccountRepository(AccountRepository):
    """SQLAlchemy implementation of AccountRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, account_id: AccountId) -> Account:
        stmt = select(accounts_table).where(accounts_table.c.id == str(account_id))
        return await self._one(stmt, f"Account not found: {account_id}")

    async def get_by_provider(self, provider: str, external_id: str) -> Account:
        stmt = (
            select(accounts_table)
            .join(
                account_providers_table,
                account_providers_table.c.account_id == accounts_table.c.id,
            )
            .where(
                account_providers_table.c.provider == provider,
                account_providers_table.c.external_id == external_id,
            )
        )
        return await self._one(stmt, f"No account linked to {provider}:{external_id}")

    async def get_by_email(self, email: str) -> Account:
        stmt = (
            select(accounts_table)
            .where(accounts_table.c.email == email)
            .order_by(accounts_table.c.created_at, accounts_table.c.id)
            .limit(1)
        )
        return await self._one(stmt, "No account with that email")

    async def create(self, account: Account) -> None:
        conflict = f"Account {account.id} collides with an existing account or provider link"
        async with _write_errors(self.session, conflict):
            await self.session.execute(insert(accounts_table).values(**_account_to_dict(account)))
            for identity in account.providers:
                await self.session.execute(
                    insert(account_providers_table).values(
                        **_provider_to_dict(account.id, identity)
                    )
                )
            await self.session.flush()

    async def add_provider(self, account_id: AccountId, identity: ProviderIdentity) -> None:
        conflict = f"{identity.provider}:{identity.external_id} is already linked to an account"
        async with _write_errors(self.session, conflict):
            await self.session.execute(
                insert(account_providers_table).values(**_provider_to_dict(account_id, identity))
            )
            await self.session.execute(
                accounts_table.update()
                .where(accounts_table.c.id == str(account_id))
                .values(updated_at=datetime.now(UTC))
            )
            await self.session.flush()

    async def _one(self, stmt, not_found_message: str) -> Account:
        with _read_errors():
            result = await self.session.execute(stmt)
            row = result.mappings().first()
            if row is None:
                raise NotFoundError(not_found_message, code="account_not_found")
            providers = await self._providers_for(row["id"])
        return _row_to_account(dict(row), providers)

    async def _providers_for(self, account_id: str) -> list[ProviderIdentity]:
        stmt = (
            select(account_providers_table.c.provider, account_providers_table.c.external_id)
            .where(account_providers_table.c.account_id == account_id)
            .order_by(account_providers_table.c.id)
        )
        result = await self.session.execute(stmt)
        return [
            ProviderIdentity(provider=row["provider"], external_id=row["external_id"])
            for row in result.mappings()
        ]


@contextmanager
def _read_errors() -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        raise StorageUnavailableError(f"Account store unavailable: {e}") from e


@asynccontextmanager
async def _write_errors(session: AsyncSession, conflict_message: str) -> AsyncIterator[None]:
    """Translate write failures, rolling back so the session stays usable."""
    try:
        yield
    except IntegrityError as e:
        await session.rollback()
        raise ConflictError(conflict_message, code="duplicate_link") from e
    except SQLAlchemyError as e:
        await session.rollback()
        raise StorageUnavailableError(f"Account store unavailable: {e}") from e
