"""Auth domain commands."""

from .login import (
    CompleteOAuth,
    CompleteOAuthHandler,
    CompleteOAuthResult,
    CredentialCookie,
    InitiateLogin,
    InitiateLoginHandler,
    InitiateLoginResult,
)

__all__ = [
    "CompleteOAuth",
    "CompleteOAuthHandler",
    "CompleteOAuthResult",
    "CredentialCookie",
    "InitiateLogin",
    "InitiateLoginHandler",
    "InitiateLoginResult",
]
