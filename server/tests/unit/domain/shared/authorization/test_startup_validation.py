"""Tests for startup validation of handler __auth__ declarations."""

import pytest

from heimdall.application.api.v1.routes import accounts, oauth  # noqa: F401
from heimdall.domain.auth.command.login import CompleteOAuthHandler, InitiateLoginHandler
from heimdall.domain.auth.query.get_account import GetAccountHandler
from heimdall.domain.shared.authorization.startup import (
    validate_all_handlers,
    validate_handlers,
)
from heimdall.domain.shared.error import ConfigurationError


class UngatedHandler:
    """Stand-in for a handler that forgot its gate."""


class TestStartupValidation:
    def test_registered_handlers_all_declare_gates(self):
        validate_all_handlers()

    def test_gated_handlers_pass(self):
        validate_handlers([InitiateLoginHandler, CompleteOAuthHandler, GetAccountHandler])

    def test_missing_gate_names_the_handler(self):
        with pytest.raises(ConfigurationError, match="UngatedHandler"):
            validate_handlers([InitiateLoginHandler, UngatedHandler])

    def test_non_gate_auth_value_is_rejected(self):
        class MisconfiguredHandler:
            __auth__ = "admin"

        with pytest.raises(ConfigurationError, match="MisconfiguredHandler"):
            validate_handlers([MisconfiguredHandler])
