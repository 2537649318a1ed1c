from heimdall.application.api.v1.routes import accounts, health, oauth

__all__ = ["accounts", "health", "oauth"]
