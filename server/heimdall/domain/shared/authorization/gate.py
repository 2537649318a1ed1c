"""Handler-level authorization gates: public() and at_least(Role)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from heimdall.domain.auth.model.role import Role


class Gate:
    """Base for handler-level authorization gates.

    Every CommandHandler/QueryHandler must declare ``__auth__: ClassVar[Gate]``.
    """


@dataclass(frozen=True)
class Public(Gate):
    """No authentication required."""


@dataclass(frozen=True)
class AtLeast(Gate):
    """Gate that requires the principal to have at least the given role."""

    role: "Role"


_PUBLIC = Public()


def public() -> Public:
    """Mark a handler as publicly accessible (no auth required)."""
    return _PUBLIC


def at_least(role: "Role") -> AtLeast:
    """Mark a handler as requiring at least the given role."""
    return AtLeast(role=role)


def enforce(gate: Gate | None, principal: object, handler_name: str) -> None:
    """Evaluate a handler's gate against the current principal.

    Raises:
        ConfigurationError: If the handler declares no gate.
        AuthenticationError: If the gate needs a principal and there is none.
        AuthorizationError: If the principal's role is too low.
    """
    from heimdall.domain.auth.model.principal import Principal
    from heimdall.domain.shared.error import (
        AuthenticationError,
        AuthorizationError,
        ConfigurationError,
    )

    if not isinstance(gate, Gate):
        raise ConfigurationError(f"Handler {handler_name} has no __auth__ declaration")

    if isinstance(gate, Public):
        return

    if isinstance(gate, AtLeast):
        if not isinstance(principal, Principal):
            raise AuthenticationError("Authentication required", code="missing_token")
        if not principal.has_role(gate.role):
            raise AuthorizationError(
                f"Access denied: insufficient role for {handler_name}",
                code="access_denied",
            )
        return

    raise ConfigurationError(  # pragma: no cover
        f"Handler {handler_name} has unhandled __auth__ type: {type(gate).__name__}"
    )
