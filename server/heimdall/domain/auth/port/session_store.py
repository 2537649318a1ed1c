"""Flow session storage port."""

from abc import abstractmethod
from typing import Protocol

from heimdall.domain.auth.model.flow import FlowSession
from heimdall.domain.shared.port import Port


class FlowSessionStore(Port, Protocol):
    """Short-lived storage for in-flight login attempts.

    Sessions are keyed by a random value the HTTP layer binds to the caller's
    browser (a cookie). The store never sees requests or responses.
    """

    @abstractmethod
    async def new(self) -> FlowSession:
        """Create an empty session with a fresh random key (not yet saved)."""
        ...

    @abstractmethod
    async def load(self, key: str) -> FlowSession | None:
        """Load a session by key. Expired sessions are treated as absent."""
        ...

    @abstractmethod
    async def save(self, session: FlowSession) -> None:
        """Persist a session (create or replace)."""
        ...

    @abstractmethod
    async def discard(self, key: str) -> None:
        """Delete a session. Discarding an unknown key is a no-op."""
        ...
