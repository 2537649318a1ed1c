"""Centralized error transformation for API routes.

Maps Heimdall errors to JSON error responses. The status is picked from the
error's kind alone; internal errors are redacted behind a correlation id.
"""

import logging
import secrets

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from heimdall.domain.shared.error import ErrorKind, HeimdallError

logger = logging.getLogger(__name__)

ERROR_KIND_STATUS_MAP: dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PROVIDER: 502,
    ErrorKind.INTERNAL: 500,
}

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ErrorResponse(BaseModel):
    """Body of every error response."""

    code: str
    message: str
    correlation_id: str | None = None


def new_correlation_id() -> str:
    return secrets.token_hex(8)


def map_error(error: Exception) -> tuple[int, ErrorResponse]:
    """Map any exception to a status code and a caller-safe body.

    Internal errors and unexpected exceptions are logged in full under a
    fresh correlation id; the caller only sees the id.
    """
    if isinstance(error, HeimdallError) and not error.is_internal:
        status_code = ERROR_KIND_STATUS_MAP[error.kind]
        return status_code, ErrorResponse(code=error.code, message=error.message)

    correlation_id = new_correlation_id()
    logger.error(
        "Internal error: correlation_id=%s, type=%s, message=%s",
        correlation_id,
        type(error).__name__,
        error,
        exc_info=error,
    )
    return 500, ErrorResponse(
        code="internal_error",
        message=INTERNAL_ERROR_MESSAGE,
        correlation_id=correlation_id,
    )


def error_response(error: Exception) -> JSONResponse:
    """Render an exception as a JSON error response."""
    status_code, body = map_error(error)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )
