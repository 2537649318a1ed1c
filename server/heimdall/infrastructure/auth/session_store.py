"""In-process flow session store."""

import logging

from heimdall.config import FlowSessionConfig
from heimdall.domain.auth.model.flow import FlowSession, new_session_key
from heimdall.domain.auth.port.session_store import FlowSessionStore

logger = logging.getLogger(__name__)


class InMemoryFlowSessionStore(FlowSessionStore):
    """Flow sessions held in a dict for the lifetime of the process.

    Suitable for a single worker. Expired sessions are purged lazily on
    every write.
    """

    def __init__(self, config: FlowSessionConfig) -> None:
        self._ttl_seconds = config.ttl_seconds
        self._sessions: dict[str, FlowSession] = {}

    async def new(self) -> FlowSession:
        return FlowSession.create(new_session_key(), self._ttl_seconds)

    async def load(self, key: str) -> FlowSession | None:
        session = self._sessions.get(key)
        if session is None or session.is_expired:
            return None
        return session.model_copy()

    async def save(self, session: FlowSession) -> None:
        self._purge_expired()
        self._sessions[session.key] = session.model_copy()

    async def discard(self, key: str) -> None:
        self._sessions.pop(key, None)

    def _purge_expired(self) -> None:
        expired = [key for key, session in self._sessions.items() if session.is_expired]
        for key in expired:
            del self._sessions[key]
        if expired:
            logger.debug("Purged %d expired flow sessions", len(expired))
