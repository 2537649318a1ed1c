"""Unit tests for error-to-response mapping."""

import logging

import pytest

from heimdall.application.api.v1.errors import error_response, map_error
from heimdall.domain.shared.error import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    ConfigurationError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    ProviderError,
    SigningError,
    StorageUnavailableError,
)


class TestMapError:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (BadRequestError("State mismatch", code="state_mismatch"), 400),
            (AuthenticationError("Authentication required", code="missing_token"), 401),
            (InvalidTokenError(), 401),
            (AuthorizationError("Access denied", code="access_denied"), 403),
            (NotFoundError("Account not found"), 404),
            (ProviderError("bad_verification_code"), 502),
        ],
    )
    def test_caller_facing_errors_keep_their_message(self, error, status: int):
        status_code, body = map_error(error)

        assert status_code == status
        assert body.message == error.message
        assert body.code == error.code
        assert body.correlation_id is None

    @pytest.mark.parametrize(
        "error",
        [
            StorageUnavailableError("connection refused on db-1:5432"),
            ConflictError("duplicate link"),
            SigningError("no key"),
            ConfigurationError("bad config"),
            RuntimeError("boom"),
        ],
    )
    def test_internal_errors_are_redacted(self, error: Exception):
        status_code, body = map_error(error)

        assert status_code == 500
        assert body.message == "Internal server error"
        assert body.code == "internal_error"
        assert body.correlation_id is not None
        assert len(body.correlation_id) == 16

    def test_internal_error_is_logged_under_correlation_id(self, caplog):
        with caplog.at_level(logging.ERROR, logger="heimdall.application.api.v1.errors"):
            _, body = map_error(StorageUnavailableError("connection refused on db-1:5432"))

        assert body.correlation_id in caplog.text
        assert "connection refused on db-1:5432" in caplog.text

    def test_correlation_ids_are_unique(self):
        ids = {map_error(RuntimeError("x"))[1].correlation_id for _ in range(10)}

        assert len(ids) == 10


class TestErrorResponse:
    def test_unauthorized_carries_bearer_challenge(self):
        response = error_response(InvalidTokenError())

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_body_omits_empty_correlation_id(self):
        response = error_response(BadRequestError("nope", code="bad"))

        assert response.body == b'{"code":"bad","message":"nope"}'
