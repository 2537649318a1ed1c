"""External identity returned by an OAuth provider."""

from dataclasses import dataclass

from heimdall.domain.auth.model.value import ProviderIdentity


@dataclass(frozen=True)
class ExternalIdentity:
    """Who the provider says the caller is.

    Produced once per successful code exchange. Never persisted as-is;
    reconciliation maps it onto an Account.
    """

    provider: str  # Provider kind, e.g. "github"
    external_id: str
    email: str | None  # Not every provider discloses one
    display_name: str | None

    @property
    def provider_identity(self) -> ProviderIdentity:
        return ProviderIdentity(provider=self.provider, external_id=self.external_id)
