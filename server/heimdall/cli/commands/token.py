"""Session token inspection commands."""

import sys
from pathlib import Path

import cyclopts

from heimdall.cli.console import get_console
from heimdall.domain.auth.service.token import TokenService
from heimdall.domain.shared.error import ConfigurationError, InvalidTokenError

app = cyclopts.App(name="token", help="Session token tools")


@app.command
def verify(token: str, *, public_key: Path) -> None:
    """Verify a session token and print its claims.

    Args:
        token: The encoded session token.
        public_key: PEM file holding the verification key.
    """
    console = get_console()

    try:
        service = TokenService.for_verification(public_key.read_text())
    except OSError as e:
        console.error(f"Cannot read public key: {e}")
        sys.exit(1)
    except ConfigurationError as e:
        console.error(e.message)
        sys.exit(1)

    try:
        claims = service.verify(token)
    except InvalidTokenError as e:
        console.error(e.message, hint="Wrong key, tampered or expired token")
        sys.exit(1)

    console.success("Token is valid")
    console.fields(
        {
            "issuer": claims.issuer,
            "subject": claims.subject,
            "role": claims.role,
            "issued at": claims.issued_at.isoformat() if claims.issued_at else None,
            "expires at": claims.expires_at.isoformat(),
        }
    )
