"""Auth domain services."""

from .account import AccountService
from .auth import AuthService
from .token import TokenService

__all__ = ["AccountService", "AuthService", "TokenService"]
