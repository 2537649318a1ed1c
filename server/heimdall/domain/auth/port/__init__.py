"""Auth domain ports."""

from .oauth_provider import OAuthProvider
from .provider_registry import ProviderRegistry
from .repository import AccountRepository
from .session_store import FlowSessionStore

__all__ = [
    "AccountRepository",
    "FlowSessionStore",
    "OAuthProvider",
    "ProviderRegistry",
]
