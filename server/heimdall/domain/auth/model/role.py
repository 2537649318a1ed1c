"""Account roles."""

from enum import IntEnum


class Role(IntEnum):
    """Roles with numeric ordering.

    Higher values inherit all permissions of lower values. Serialized by
    lower-case name (``"standard"``, ``"administrator"``) in tokens and
    storage.
    """

    STANDARD = 10
    ADMINISTRATOR = 30

    @classmethod
    def from_name(cls, name: str) -> "Role":
        """Look up a role by its serialized name.

        Raises:
            ValueError: If the name is not a known role.
        """
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown role: {name}") from None

    def __str__(self) -> str:
        return self.name.lower()
