"""Auth domain models."""

from .account import Account
from .claims import Claims
from .external_identity import ExternalIdentity
from .flow import FlowPhase, FlowSession, FlowState
from .identity import Anonymous, Identity
from .principal import Principal
from .role import Role
from .value import AccountId, ProviderIdentity

__all__ = [
    "Account",
    "AccountId",
    "Anonymous",
    "Claims",
    "ExternalIdentity",
    "FlowPhase",
    "FlowSession",
    "FlowState",
    "Identity",
    "Principal",
    "ProviderIdentity",
    "Role",
]
