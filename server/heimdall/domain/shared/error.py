"""Error hierarchy for Heimdall.

Every error carries a caller-facing ``message``, a machine-readable ``code``
and a class-level ``kind``. The boundary layer picks the transport status from
``kind`` alone:

- BAD_REQUEST / UNAUTHORIZED / FORBIDDEN / NOT_FOUND: caller-correctable, the
  message is returned as-is.
- PROVIDER: the upstream OAuth provider rejected or failed the exchange, the
  message is returned as-is.
- INTERNAL: never surfaced verbatim. The caller gets a generic message plus a
  correlation id; the full error is logged under the same id.

These errors are mapped to HTTP responses by the exception handlers in app.py.
"""

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    PROVIDER = "provider"
    INTERNAL = "internal"


class HeimdallError(Exception):
    """Base class for all Heimdall errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)

    @property
    def is_internal(self) -> bool:
        return self.kind is ErrorKind.INTERNAL


# =============================================================================
# Caller-facing errors
# =============================================================================


class BadRequestError(HeimdallError):
    """Malformed or missing parameters, unknown provider, state mismatch, disallowed return URL."""

    kind = ErrorKind.BAD_REQUEST


class AuthenticationError(HeimdallError):
    """No usable credential was presented."""

    kind = ErrorKind.UNAUTHORIZED


class InvalidTokenError(AuthenticationError):
    """A session token failed verification.

    Deliberately a single classification: malformed encoding, bad signature,
    wrong algorithm and missing or expired expiration all look the same to
    the caller.
    """

    def __init__(self, message: str = "Invalid token", code: str | None = "invalid_token") -> None:
        super().__init__(message, code=code)


class AuthorizationError(HeimdallError):
    """Caller is authenticated but not allowed to perform this operation."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(HeimdallError):
    """No matching account, provider or session.

    Inside account reconciliation a lookup miss is the only condition that
    allows falling through to the next step.
    """

    kind = ErrorKind.NOT_FOUND


class ProviderError(HeimdallError):
    """Upstream OAuth provider rejected or failed the exchange."""

    kind = ErrorKind.PROVIDER


# =============================================================================
# Internal errors (never shown to the caller verbatim)
# =============================================================================


class InternalError(HeimdallError):
    """Base class for server-side failures."""

    kind = ErrorKind.INTERNAL


class StorageUnavailableError(InternalError):
    """Account or session store is unavailable."""


class ConflictError(InternalError):
    """A write collided with an existing row (e.g. a duplicate provider link)."""


class SigningError(InternalError):
    """A session token could not be signed."""


class ConfigurationError(InternalError):
    """System misconfiguration detected."""
