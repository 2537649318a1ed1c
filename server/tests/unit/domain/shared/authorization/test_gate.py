"""Unit tests for handler authorization gates."""

import pytest

from heimdall.domain.auth.model.identity import Anonymous
from heimdall.domain.auth.model.principal import Principal
from heimdall.domain.auth.model.role import Role
from heimdall.domain.auth.model.value import AccountId
from heimdall.domain.shared.authorization.gate import at_least, enforce, public
from heimdall.domain.shared.authorization.startup import validate_all_handlers
from heimdall.domain.shared.error import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
)


def make_principal(role: Role) -> Principal:
    return Principal(account_id=AccountId.generate(), role=role)


class TestEnforce:
    def test_public_admits_anonymous(self):
        enforce(public(), Anonymous(), "Handler")

    def test_at_least_rejects_anonymous(self):
        with pytest.raises(AuthenticationError) as exc_info:
            enforce(at_least(Role.STANDARD), Anonymous(), "Handler")

        assert exc_info.value.code == "missing_token"

    def test_at_least_rejects_missing_principal(self):
        with pytest.raises(AuthenticationError):
            enforce(at_least(Role.STANDARD), None, "Handler")

    def test_role_hierarchy(self):
        enforce(at_least(Role.STANDARD), make_principal(Role.ADMINISTRATOR), "Handler")
        enforce(at_least(Role.ADMINISTRATOR), make_principal(Role.ADMINISTRATOR), "Handler")

        with pytest.raises(AuthorizationError):
            enforce(at_least(Role.ADMINISTRATOR), make_principal(Role.STANDARD), "Handler")

    def test_missing_gate_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            enforce(None, make_principal(Role.ADMINISTRATOR), "Handler")


class TestStartupValidation:
    def test_all_registered_handlers_declare_a_gate(self):
        # Importing the handler modules registers them as subclasses
        import heimdall.domain.auth.command  # noqa: F401
        import heimdall.domain.auth.query  # noqa: F401

        validate_all_handlers()
