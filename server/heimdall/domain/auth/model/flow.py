"""Per-login-attempt state for the OAuth flow."""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from heimdall.domain.shared.model.entity import Entity

SESSION_KEY_BYTES = 32


def new_session_key() -> str:
    """Random, unguessable key binding a flow session to one browser."""
    return secrets.token_urlsafe(SESSION_KEY_BYTES)


class FlowPhase(str, Enum):
    """Where a login attempt is in the login/callback state machine."""

    IDLE = "idle"
    AWAITING_CALLBACK = "awaiting_callback"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class FlowState:
    """What the login phase leaves behind for the callback phase."""

    csrf_token: str
    return_to: str | None = None
    phase: FlowPhase = FlowPhase.AWAITING_CALLBACK


class FlowSession(Entity):
    """A short-lived session bound to the caller's browser by ``key``.

    Holds at most one FlowState. Consumed and discarded exactly once at
    callback.
    """

    key: str
    state: FlowState | None = None
    created_at: datetime
    expires_at: datetime

    @classmethod
    def create(cls, key: str, ttl_seconds: int) -> "FlowSession":
        now = datetime.now(UTC)
        return cls(
            key=key,
            state=None,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= datetime.now(UTC)
