"""Domain models for player identities."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IdentityRecord:
    """Represents a stable participant identity."""

    id: str
    external_id: str
    name: str
