"""Process-local session repository."""

import copy
import threading
from dataclasses import dataclass, field
from uuid import UUID

from tag_arena.domain.sessions import Session, SessionSummary
from tag_arena.services.registry import SessionRepository


@dataclass
class InMemorySessionRepository(SessionRepository):
    """Keeps sessions in a dict; every read and write copies the aggregate."""

    sessions: dict[UUID, Session] = field(default_factory=dict)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def add_session(self, session: Session) -> None:
        with self._lock:
            if session.id in self.sessions:
                raise RuntimeError(f"Session {session.id} already stored")
            self.sessions[session.id] = copy.deepcopy(session)

    def get_session(self, session_id: UUID) -> Session | None:
        with self._lock:
            session = self.sessions.get(session_id)
            return copy.deepcopy(session) if session else None

    def save_session(self, session: Session) -> None:
        with self._lock:
            if session.id not in self.sessions:
                raise RuntimeError(f"Failed to save unknown session {session.id}")
            self.sessions[session.id] = copy.deepcopy(session)

    def list_recent_sessions(self, limit: int) -> list[SessionSummary]:
        with self._lock:
            ordered = _newest_first(list(self.sessions.values()))
            return [session.summary() for session in ordered[:limit]]

    def list_session_ids_for_owner(self, owner_id: str) -> list[UUID]:
        with self._lock:
            owned = [
                session
                for session in self.sessions.values()
                if session.player_for(owner_id) is not None
            ]
        return [session.id for session in _newest_first(owned)]


def _newest_first(sessions: list[Session]) -> list[Session]:
    # Ties on created_at fall back to insertion order.
    indexed = sorted(
        enumerate(sessions),
        key=lambda item: (item[1].created_at, item[0]),
        reverse=True,
    )
    return [session for _, session in indexed]
