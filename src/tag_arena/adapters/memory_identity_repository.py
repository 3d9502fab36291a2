"""Process-local identity repository."""

import threading
from dataclasses import dataclass, field
from uuid import uuid4

from tag_arena.domain.identities import IdentityRecord
from tag_arena.services.identity import IdentityRepository


@dataclass
class InMemoryIdentityRepository(IdentityRepository):
    """Identity storage for single-process deployments and tests."""

    identities: dict[str, IdentityRecord] = field(default_factory=dict)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def get_by_external_id(self, external_id: str) -> IdentityRecord | None:
        with self._lock:
            for identity in self.identities.values():
                if identity.external_id == external_id:
                    return identity
        return None

    def create_identity(self, external_id: str, name: str) -> IdentityRecord:
        identity = IdentityRecord(id=str(uuid4()), external_id=external_id, name=name)
        with self._lock:
            self.identities[identity.id] = identity
        return identity

    def get_identities(self, identity_ids: list[str]) -> list[IdentityRecord]:
        with self._lock:
            return [
                self.identities[identity_id]
                for identity_id in identity_ids
                if identity_id in self.identities
            ]
