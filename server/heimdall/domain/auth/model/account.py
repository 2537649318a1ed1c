"""Account aggregate for the auth domain."""

from datetime import UTC, datetime

from heimdall.domain.auth.model.external_identity import ExternalIdentity
from heimdall.domain.auth.model.role import Role
from heimdall.domain.auth.model.value import AccountId, ProviderIdentity
from heimdall.domain.shared.error import ConflictError
from heimdall.domain.shared.model.aggregate import Aggregate


class Account(Aggregate):
    """A local account that one human signs into through any linked provider.

    Invariants:
    - `id` is immutable after creation
    - each provider kind is linked at most once
    - linkages are only ever appended, never removed
    - `email` is a linking hint, not a unique key
    """

    id: AccountId
    display_name: str | None
    email: str | None = None
    role: Role = Role.STANDARD
    providers: list[ProviderIdentity] = []
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def create(cls, identity: ExternalIdentity) -> "Account":
        """Create a standard account linked to a single provider identity."""
        return cls(
            id=AccountId.generate(),
            display_name=identity.display_name,
            email=identity.email,
            role=Role.STANDARD,
            providers=[identity.provider_identity],
            created_at=datetime.now(UTC),
        )

    def is_linked_to(self, provider_identity: ProviderIdentity) -> bool:
        return provider_identity in self.providers

    def link(self, provider_identity: ProviderIdentity) -> None:
        """Append a provider linkage.

        Linking an identity that is already present is a no-op.

        Raises:
            ConflictError: If a different identity of the same provider kind is
                already linked.
        """
        if self.is_linked_to(provider_identity):
            return
        if any(p.provider == provider_identity.provider for p in self.providers):
            raise ConflictError(
                f"Account {self.id} already has a {provider_identity.provider} identity",
                code="provider_already_linked",
            )
        self.providers = [*self.providers, provider_identity]
        self.updated_at = datetime.now(UTC)
