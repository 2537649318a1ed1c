from heimdall.infrastructure.auth.di import AuthInfraProvider

__all__ = ["AuthInfraProvider"]
