"""SQL flow session store, shared by every worker that uses the same database."""

from datetime import UTC, datetime

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from heimdall.config import FlowSessionConfig
from heimdall.domain.auth.model.flow import FlowPhase, FlowSession, FlowState, new_session_key
from heimdall.domain.auth.port.session_store import FlowSessionStore
from heimdall.domain.shared.error import StorageUnavailableError
from heimdall.infrastructure.persistence.repository.account import as_utc
from heimdall.infrastructure.persistence.tables import flow_sessions_table


def _state_to_json(state: FlowState | None) -> dict | None:
    if state is None:
        return None
    return {
        "csrf_token": state.csrf_token,
        "return_to": state.return_to,
        "phase": state.phase.value,
    }


def _json_to_state(data: dict | None) -> FlowState | None:
    if not data:
        return None
    return FlowState(
        csrf_token=data["csrf_token"],
        return_to=data.get("return_to"),
        phase=FlowPhase(data.get("phase", FlowPhase.AWAITING_CALLBACK.value)),
    )


class SqlFlowSessionStore(FlowSessionStore):
    """SQLAlchemy implementation of FlowSessionStore."""

    def __init__(self, session: AsyncSession, config: FlowSessionConfig) -> None:
        self.session = session
        self._ttl_seconds = config.ttl_seconds

    async def new(self) -> FlowSession:
        return FlowSession.create(new_session_key(), self._ttl_seconds)

    async def load(self, key: str) -> FlowSession | None:
        stmt = select(flow_sessions_table).where(flow_sessions_table.c.key == key)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageUnavailableError(f"Flow session store unavailable: {e}") from e

        row = result.mappings().first()
        if row is None:
            return None

        session = FlowSession(
            key=row["key"],
            state=_json_to_state(row["state"]),
            created_at=as_utc(row["created_at"]),
            expires_at=as_utc(row["expires_at"]),
        )
        return None if session.is_expired else session

    async def save(self, session: FlowSession) -> None:
        try:
            # Replace, plus opportunistic cleanup of abandoned attempts
            await self.session.execute(
                delete(flow_sessions_table).where(
                    (flow_sessions_table.c.key == session.key)
                    | (flow_sessions_table.c.expires_at <= datetime.now(UTC))
                )
            )
            await self.session.execute(
                insert(flow_sessions_table).values(
                    key=session.key,
                    state=_state_to_json(session.state),
                    created_at=session.created_at,
                    expires_at=session.expires_at,
                )
            )
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageUnavailableError(f"Flow session store unavailable: {e}") from e

    async def discard(self, key: str) -> None:
        try:
            await self.session.execute(
                delete(flow_sessions_table).where(flow_sessions_table.c.key == key)
            )
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageUnavailableError(f"Flow session store unavailable: {e}") from e
