"""Principal: authenticated identity resolved per request from a session token."""

from dataclasses import dataclass

from heimdall.domain.auth.model.claims import Claims
from heimdall.domain.auth.model.identity import Identity
from heimdall.domain.auth.model.role import Role
from heimdall.domain.auth.model.value import AccountId


@dataclass(frozen=True)
class Principal(Identity):
    """The authenticated account behind the current request.

    Built from verified claims only; no store lookup is needed.
    """

    account_id: AccountId
    role: Role

    @classmethod
    def from_claims(cls, claims: Claims) -> "Principal":
        return cls(account_id=claims.subject, role=claims.role)

    def has_role(self, role: Role) -> bool:
        """Check if the principal's role >= the given role (hierarchy comparison)."""
        return self.role >= role

    def is_account(self, account_id: AccountId) -> bool:
        return self.account_id == account_id
