"""Value objects for the auth domain."""

from dataclasses import dataclass
from uuid import UUID, uuid4

from pydantic import RootModel


class AccountId(RootModel[UUID]):
    """Opaque, stable identifier for an Account."""

    @classmethod
    def generate(cls) -> "AccountId":
        return cls(uuid4())

    @classmethod
    def parse(cls, value: str) -> "AccountId":
        """Parse the string form used in token subjects and URLs.

        Raises:
            ValueError: If the value is not a UUID.
        """
        return cls(UUID(value))

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)


@dataclass(frozen=True)
class ProviderIdentity:
    """An identity at one OAuth provider.

    Encapsulates provider kind + external_id together since they're always
    used as a pair. Each pair belongs to at most one Account.
    """

    provider: str  # e.g., "github", "orcid"
    external_id: str  # Provider-assigned user ID
