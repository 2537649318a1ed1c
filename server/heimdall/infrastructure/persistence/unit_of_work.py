"""SQLAlchemy-backed unit of work."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from heimdall.domain.shared.error import StorageUnavailableError
from heimdall.domain.shared.port import UnitOfWork

logger = logging.getLogger(__name__)


class SqlUnitOfWork(UnitOfWork):
    """Commits the request's session on demand."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error("Commit failed: %s", e)
            raise StorageUnavailableError(f"Commit failed: {e}", code="commit_failed") from e
