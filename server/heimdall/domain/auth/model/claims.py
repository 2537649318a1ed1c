"""Claims carried by a session token."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from heimdall.domain.auth.model.role import Role
from heimdall.domain.auth.model.value import AccountId


class Claims(BaseModel):
    """Verified contents of a session token.

    Self-contained: no server-side session backs it, so validity is decided by
    signature and expiration alone.
    """

    model_config = ConfigDict(frozen=True)

    issuer: str
    subject: AccountId
    role: Role
    expires_at: datetime
    issued_at: datetime | None = None

    def to_payload(self) -> dict[str, Any]:
        """Registered JWT claim names, plus ``role``."""
        payload: dict[str, Any] = {
            "iss": self.issuer,
            "sub": str(self.subject),
            "role": str(self.role),
            "exp": int(self.expires_at.timestamp()),
        }
        if self.issued_at is not None:
            payload["iat"] = int(self.issued_at.timestamp())
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Claims":
        """Build claims from a verified JWT payload.

        Raises:
            KeyError: If a required claim is absent.
            ValueError: If the subject or role cannot be parsed.
        """
        iat = payload.get("iat")
        return cls(
            issuer=payload.get("iss", ""),
            subject=AccountId.parse(payload["sub"]),
            role=Role.from_name(payload["role"]),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            issued_at=datetime.fromtimestamp(iat, UTC) if iat is not None else None,
        )
