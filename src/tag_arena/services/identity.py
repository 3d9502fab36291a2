"""Identity lookups for session participants."""

from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from tag_arena.domain.identities import IdentityRecord
from tag_arena.services.clock import Clock

ANONYMOUS_PREFIX = "anon"


class IdentityRepository(Protocol):
    """Persistence interface for identities."""

    def get_by_external_id(self, external_id: str) -> IdentityRecord | None:
        """Return the identity for an external id, if present."""

    def create_identity(self, external_id: str, name: str) -> IdentityRecord:
        """Create and return a new identity."""

    def get_identities(self, identity_ids: list[str]) -> list[IdentityRecord]:
        """Return the identities matching the given ids."""


@dataclass
class IdentityService:
    """Resolves callers to stable owner ids and display names."""

    repository: IdentityRepository
    clock: Clock

    def ensure_identity(
        self, external_id: str, name: str | None = None
    ) -> IdentityRecord:
        """Return the identity for an external id, creating it if needed."""
        existing = self.repository.get_by_external_id(external_id)
        if existing:
            return existing
        return self.repository.create_identity(external_id, name or external_id)

    def anonymous_identity(self, name: str) -> IdentityRecord:
        """Create a throwaway identity for a caller without an account."""
        external_id = f"{ANONYMOUS_PREFIX}_{self.clock.now()}_{uuid4().hex[:9]}"
        return self.repository.create_identity(external_id, name)

    def display_names(self, owner_ids: list[str]) -> dict[str, str]:
        """Map owner ids to display names; unknown ids are omitted."""
        if not owner_ids:
            return {}
        identities = self.repository.get_identities(owner_ids)
        return {identity.id: identity.name for identity in identities}
