"""Session registry: the single gatekeeper to persisted session state.

Mutations of one session are serialized with a per-session lock. Each
mutation loads a fresh copy of the aggregate, applies the transition and
writes the whole aggregate back in one ``save_session`` call, so a failed
precondition leaves storage untouched.
"""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID, uuid4

from tag_arena.domain.errors import SessionAlreadyExists, SessionNotFound
from tag_arena.domain.sessions import Session, SessionSummary
from tag_arena.services.clock import Clock


class SessionRepository(Protocol):
    """Persistence interface for sessions and their players."""

    def add_session(self, session: Session) -> None:
        """Persist a new session together with its players."""

    def get_session(self, session_id: UUID) -> Session | None:
        """Return a detached copy of a session, if present."""

    def save_session(self, session: Session) -> None:
        """Persist the session row and all of its player rows."""

    def list_recent_sessions(self, limit: int) -> list[SessionSummary]:
        """Return sessions ordered by creation time, newest first."""

    def list_session_ids_for_owner(self, owner_id: str) -> list[UUID]:
        """Return ids of sessions the owner plays in, newest first."""


@dataclass
class SessionRegistry:
    """Creates, looks up and serializes access to sessions."""

    repository: SessionRepository
    clock: Clock
    id_factory: Callable[[], UUID] = uuid4
    _locks: dict[UUID, threading.Lock] = field(
        default_factory=dict, init=False, repr=False
    )
    _locks_guard: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def create(self, radius: float, creator_id: str) -> Session:
        """Open a new session with the creator as its first player."""
        session_id = self.id_factory()
        with self.locked(session_id):
            if self.repository.get_session(session_id) is not None:
                raise SessionAlreadyExists(f"Game {session_id} already exists")
            session = Session.open(
                session_id=session_id,
                player_id=self.id_factory(),
                radius=radius,
                creator_id=creator_id,
                now=self.clock.now(),
            )
            self.repository.add_session(session)
        return session

    def get(self, session_id: UUID) -> Session | None:
        """Return a consistent copy of a session, if present."""
        lock = self._lock_if_known(session_id)
        if lock is None:
            return None
        with lock:
            return self.repository.get_session(session_id)

    @contextmanager
    def mutate(self, session_id: UUID) -> Iterator[Session]:
        """Yield a session for exclusive modification and persist it on success."""
        lock = self._lock_if_known(session_id)
        if lock is None:
            raise SessionNotFound
        with lock:
            session = self.repository.get_session(session_id)
            if session is None:
                raise SessionNotFound
            yield session
            self.repository.save_session(session)

    @contextmanager
    def locked(self, session_id: UUID) -> Iterator[None]:
        """Hold the mutual-exclusion scope of one session."""
        with self._lock_for(session_id):
            yield

    def find_by_owner(self, owner_id: str) -> list[UUID]:
        """Return ids of sessions an identity created or joined."""
        return self.repository.list_session_ids_for_owner(owner_id)

    def list_recent(self, limit: int) -> list[SessionSummary]:
        """Return the most recently created sessions."""
        return self.repository.list_recent_sessions(limit)

    def _lock_for(self, session_id: UUID) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[session_id] = lock
            return lock

    def _lock_if_known(self, session_id: UUID) -> "threading.Lock | None":
        # Sessions are never deleted, so an id seen in storage stays valid.
        with self._locks_guard:
            lock = self._locks.get(session_id)
        if lock is not None:
            return lock
        if self.repository.get_session(session_id) is None:
            return None
        return self._lock_for(session_id)
