from heimdall.infrastructure.persistence.repository.account import SqlAccountRepository
from heimdall.infrastructure.persistence.repository.flow_session import SqlFlowSessionStore

__all__ = ["SqlAccountRepository", "SqlFlowSessionStore"]
