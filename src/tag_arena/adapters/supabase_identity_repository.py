"""Supabase-backed identity repository."""

from dataclasses import dataclass

from supabase import Client

from tag_arena.domain.identities import IdentityRecord
from tag_arena.services.identity import IdentityRepository


@dataclass
class SupabaseIdentityRepository(IdentityRepository):
    """Supabase implementation for identities stored in ``users``."""

    client: Client

    def get_by_external_id(self, external_id: str) -> IdentityRecord | None:
        """Return the identity for an external id, if present."""
        response = (
            self.client.table("users")
            .select("id, external_id, name")
            .eq("external_id", external_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _identity_from_row(response.data[0])
        return None

    def create_identity(self, external_id: str, name: str) -> IdentityRecord:
        """Create a new user row and return it."""
        response = (
            self.client.table("users")
            .insert({"external_id": external_id, "name": name})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _identity_from_row(response.data[0])

    def get_identities(self, identity_ids: list[str]) -> list[IdentityRecord]:
        """Return users matching the given ids."""
        response = (
            self.client.table("users")
            .select("id, external_id, name")
            .in_("id", identity_ids)
            .execute()
        )
        return [_identity_from_row(row) for row in response.data or []]


def _identity_from_row(row: dict[str, object]) -> IdentityRecord:
    return IdentityRecord(
        id=str(row["id"]),
        external_id=str(row["external_id"]),
        name=str(row["name"]),
    )
