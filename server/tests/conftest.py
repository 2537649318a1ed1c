"""Global test fixtures."""

import os

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from heimdall.config import TokenConfig
from heimdall.domain.auth.service.token import TokenService

# Keep tests independent of any YAML config on the developer's machine.
# This must happen at module load time, before any test builds a Config
os.environ.pop("HEIMDALL_CONFIG_FILE", None)
os.environ.pop("HEIMDALL_LOG_FILE", None)


def make_key_pair() -> tuple[str, str]:
    """A fresh Ed25519 key pair as (private PEM, public PEM) strings."""
    private_key = Ed25519PrivateKey.generate()
    private_pem = private_key.private_bytes(
        encoding=Encoding.PEM,
        format=PrivateFormat.PKCS8,
        encryption_algorithm=NoEncryption(),
    ).decode()
    public_pem = (
        private_key.public_key()
        .public_bytes(encoding=Encoding.PEM, format=PublicFormat.SubjectPublicKeyInfo)
        .decode()
    )
    return private_pem, public_pem


@pytest.fixture(scope="session")
def key_pair() -> tuple[str, str]:
    return make_key_pair()


@pytest.fixture
def token_config(key_pair: tuple[str, str]) -> TokenConfig:
    private_pem, public_pem = key_pair
    return TokenConfig(
        private_key=private_pem,
        public_key=public_pem,
        valid_minutes=60,
        issuer="https://auth.example.com",
    )


@pytest.fixture
def token_service(token_config: TokenConfig) -> TokenService:
    return TokenService(_config=token_config)


@pytest.fixture
def other_key_pair() -> tuple[str, str]:
    """A second, unrelated key pair."""
    return make_key_pair()
