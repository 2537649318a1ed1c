"""Token service: issues and verifies signed session tokens."""

import logging
from dataclasses import field
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    load_pem_private_key,
    load_pem_public_key,
)

from heimdall.config import TokenConfig
from heimdall.domain.auth.model.account import Account
from heimdall.domain.auth.model.claims import Claims
from heimdall.domain.shared.error import ConfigurationError, InvalidTokenError, SigningError
from heimdall.domain.shared.service import Service

logger = logging.getLogger(__name__)

# The only algorithm this service signs with or accepts.
ALGORITHM = "EdDSA"


def _load_private_key(pem: str) -> Ed25519PrivateKey | None:
    if not pem:
        return None
    try:
        key = load_pem_private_key(pem.encode(), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.warning("Signing key could not be loaded: %s", e)
        return None
    if not isinstance(key, Ed25519PrivateKey):
        logger.warning("Signing key is %s, expected Ed25519", type(key).__name__)
        return None
    return key


def _load_public_key(pem: str) -> Ed25519PublicKey:
    if not pem:
        raise ConfigurationError("No token verification key configured", code="missing_public_key")
    try:
        key = load_pem_public_key(pem.encode())
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ConfigurationError(
            f"Token verification key could not be loaded: {e}",
            code="invalid_public_key",
        ) from e
    if not isinstance(key, Ed25519PublicKey):
        raise ConfigurationError(
            f"Token verification key is {type(key).__name__}, expected Ed25519",
            code="invalid_public_key",
        )
    return key


class TokenService(Service):
    """Issues and verifies stateless session tokens (EdDSA-signed JWTs).

    - Tokens carry issuer, subject (account id), role and expiration
    - Verification needs only the public key, so relying parties can verify
      without calling back into this service
    - Key material is parsed once and never mutated, so one instance is safe
      to share between concurrent requests
    """

    _config: TokenConfig
    _private_key: Ed25519PrivateKey | None = field(init=False, default=None)
    _public_key: Ed25519PublicKey = field(init=False)

    def __post_init__(self) -> None:
        self._public_key = _load_public_key(self._config.public_key)
        self._private_key = _load_private_key(self._config.private_key)

    @classmethod
    def for_verification(cls, public_key_pem: str) -> "TokenService":
        """Create a verify-only service from a distributed public key."""
        return cls(_config=TokenConfig(public_key=public_key_pem))

    def issue(self, account: Account) -> str:
        """Create a signed session token for an account.

        Args:
            account: The account the token is issued for

        Returns:
            Encoded JWT string

        Raises:
            SigningError: If no usable private key is configured
        """
        if self._private_key is None:
            raise SigningError("No usable signing key configured", code="signing_key_unavailable")

        now = datetime.now(UTC)
        claims = Claims(
            issuer=self._config.issuer,
            subject=account.id,
            role=account.role,
            expires_at=now + timedelta(minutes=self._config.valid_minutes),
            issued_at=now,
        )

        try:
            return jwt.encode(claims.to_payload(), self._private_key, algorithm=ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise SigningError(f"Failed to sign token: {e}", code="signing_failed") from e

    def verify(self, token: str) -> Claims:
        """Verify a session token and return its claims.

        Rejects tokens that are malformed, carry a bad signature, were signed
        with any algorithm other than EdDSA, lack an expiration or have
        expired.

        Raises:
            InvalidTokenError: For every kind of verification failure
        """
        try:
            payload = jwt.decode(
                token,
                self._public_key,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
            return Claims.from_payload(payload)
        except (jwt.PyJWTError, KeyError, ValueError, TypeError) as e:
            logger.debug("Token rejected: %s", e)
            raise InvalidTokenError() from e

    def public_key_material(self) -> bytes:
        """Raw PEM bytes of the verification key, for distribution to relying parties."""
        return self._config.public_key.encode()

    @property
    def can_issue(self) -> bool:
        return self._private_key is not None

    @property
    def valid_seconds(self) -> int:
        """Token validity window in seconds."""
        return self._config.valid_minutes * 60
