"""Unit tests for TokenService."""

import base64
import json
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from heimdall.config import TokenConfig
from heimdall.domain.auth.model.account import Account
from heimdall.domain.auth.model.external_identity import ExternalIdentity
from heimdall.domain.auth.model.role import Role
from heimdall.domain.auth.service.token import TokenService
from heimdall.domain.shared.error import (
    ConfigurationError,
    InvalidTokenError,
    SigningError,
)


def make_account(role: Role = Role.STANDARD) -> Account:
    account = Account.create(
        ExternalIdentity(
            provider="github",
            external_id="583231",
            email="octocat@example.com",
            display_name="The Octocat",
        )
    )
    account.role = role
    return account


def sign_raw(private_pem: str, payload: dict) -> str:
    key = load_pem_private_key(private_pem.encode(), password=None)
    return jwt.encode(payload, key, algorithm="EdDSA")


class TestIssueAndVerify:
    def test_verify_returns_subject_and_role(self, token_service: TokenService):
        account = make_account()

        claims = token_service.verify(token_service.issue(account))

        assert claims.subject == account.id
        assert claims.role == Role.STANDARD

    def test_administrator_role_survives_round_trip(self, token_service: TokenService):
        account = make_account(Role.ADMINISTRATOR)

        claims = token_service.verify(token_service.issue(account))

        assert claims.role == Role.ADMINISTRATOR

    def test_claims_carry_issuer_and_expiry(self, token_service: TokenService):
        before = datetime.now(UTC).replace(microsecond=0)

        claims = token_service.verify(token_service.issue(make_account()))

        assert claims.issuer == "https://auth.example.com"
        assert claims.issued_at is not None
        assert claims.issued_at >= before
        assert claims.expires_at - claims.issued_at == timedelta(minutes=60)

    def test_token_is_signed_with_eddsa(self, token_service: TokenService):
        token = token_service.issue(make_account())

        assert jwt.get_unverified_header(token)["alg"] == "EdDSA"

    def test_role_serialized_by_name(self, token_service: TokenService):
        token = token_service.issue(make_account(Role.ADMINISTRATOR))

        payload = jwt.decode(token, options={"verify_signature": False})

        assert payload["role"] == "administrator"


class TestVerifyRejects:
    def test_rejects_token_from_foreign_key_pair(
        self, token_service: TokenService, other_key_pair: tuple[str, str]
    ):
        foreign = TokenService(
            _config=TokenConfig(private_key=other_key_pair[0], public_key=other_key_pair[1])
        )
        token = foreign.issue(make_account())

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_rejects_tampered_payload(self, token_service: TokenService):
        header, payload, signature = token_service.issue(make_account()).split(".")
        claims = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
        claims["role"] = "administrator"
        forged = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()

        with pytest.raises(InvalidTokenError):
            token_service.verify(f"{header}.{forged}.{signature}")

    def test_rejects_expired_token(self, token_service: TokenService, key_pair: tuple[str, str]):
        past = datetime.now(UTC) - timedelta(hours=1)
        token = sign_raw(
            key_pair[0],
            {
                "sub": str(make_account().id),
                "role": "standard",
                "exp": int(past.timestamp()),
            },
        )

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_rejects_token_without_expiration(
        self, token_service: TokenService, key_pair: tuple[str, str]
    ):
        token = sign_raw(key_pair[0], {"sub": str(make_account().id), "role": "standard"})

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_rejects_symmetric_algorithm(self, token_service: TokenService):
        exp = datetime.now(UTC) + timedelta(hours=1)
        token = jwt.encode(
            {"sub": str(make_account().id), "role": "standard", "exp": int(exp.timestamp())},
            "a-shared-secret-that-is-long-enough-for-hs256",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_rejects_unknown_role(self, token_service: TokenService, key_pair: tuple[str, str]):
        exp = datetime.now(UTC) + timedelta(hours=1)
        token = sign_raw(
            key_pair[0],
            {"sub": str(make_account().id), "role": "root", "exp": int(exp.timestamp())},
        )

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_rejects_non_uuid_subject(self, token_service: TokenService, key_pair: tuple[str, str]):
        exp = datetime.now(UTC) + timedelta(hours=1)
        token = sign_raw(
            key_pair[0],
            {"sub": "not-a-uuid", "role": "standard", "exp": int(exp.timestamp())},
        )

        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_rejects_malformed_token(self, token_service: TokenService, token: str):
        with pytest.raises(InvalidTokenError):
            token_service.verify(token)


class TestKeyMaterial:
    def test_missing_public_key_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            TokenService(_config=TokenConfig())

    def test_garbage_public_key_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            TokenService(_config=TokenConfig(public_key="not a pem"))

    def test_verify_only_service_cannot_issue(self, key_pair: tuple[str, str]):
        service = TokenService.for_verification(key_pair[1])

        assert not service.can_issue
        with pytest.raises(SigningError):
            service.issue(make_account())

    def test_verify_only_service_accepts_issued_tokens(
        self, token_service: TokenService, key_pair: tuple[str, str]
    ):
        account = make_account()
        verifier = TokenService.for_verification(key_pair[1])

        assert verifier.verify(token_service.issue(account)).subject == account.id

    def test_unusable_private_key_degrades_to_verify_only(self, key_pair: tuple[str, str]):
        service = TokenService(
            _config=TokenConfig(private_key="not a pem", public_key=key_pair[1])
        )

        assert not service.can_issue

    def test_public_key_material_is_configured_pem(
        self, token_service: TokenService, key_pair: tuple[str, str]
    ):
        assert token_service.public_key_material() == key_pair[1].encode()
        assert token_service.public_key_material().startswith(b"-----BEGIN PUBLIC KEY-----")

    def test_valid_seconds(self, token_service: TokenService):
        assert token_service.valid_seconds == 3600
