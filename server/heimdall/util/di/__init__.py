from heimdall.util.di.base import Provider
from heimdall.util.di.scope import Scope

__all__ = ["Provider", "Scope"]
