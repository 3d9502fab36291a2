"""Session engine: the public operation surface for tag games."""

import logging
import random
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from tag_arena.domain.errors import InvalidLimit
from tag_arena.domain.geometry import Point, random_edge_point, validate_point
from tag_arena.domain.sessions import (
    PlayerView,
    Session,
    SessionSnapshot,
    SessionSummary,
)
from tag_arena.services.clock import Clock
from tag_arena.services.registry import SessionRegistry

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_RADIUS = 20.0
DEFAULT_RECENT_LIMIT = 10


class IdentityDirectory(Protocol):
    """Lookup of display data for owner ids."""

    def display_names(self, owner_ids: list[str]) -> dict[str, str]:
        """Map owner ids to display names."""


@dataclass(frozen=True)
class GameplayPolicy:
    """Tunable gameplay constants."""

    player_radius: float = DEFAULT_PLAYER_RADIUS
    max_step: float | None = None

    @property
    def capture_distance(self) -> float:
        return 2 * self.player_radius


@dataclass
class SessionEngine:
    """Validates inputs, applies transitions and returns observable state."""

    registry: SessionRegistry
    identities: IdentityDirectory
    clock: Clock
    policy: GameplayPolicy = field(default_factory=GameplayPolicy)
    rng: random.Random = field(default_factory=random.Random)
    recent_limit: int = DEFAULT_RECENT_LIMIT

    def create_session(self, radius: float, creator_id: str) -> tuple[UUID, UUID]:
        """Create a waiting session and return its id and the runner's id."""
        session = self.registry.create(radius, creator_id)
        runner = session.players[0]
        logger.info(
            "Session created",
            extra={"session_id": str(session.id), "owner_id": creator_id},
        )
        return session.id, runner.id

    def join_session(self, session_id: UUID, joiner_id: str) -> UUID:
        """Join as chaser, which starts the game."""
        with self.registry.mutate(session_id) as session:
            player = session.join(
                player_id=self.registry.id_factory(),
                owner_id=joiner_id,
                position=random_edge_point(session.radius, self.rng),
                now=self.clock.now(),
            )
        logger.info(
            "Session started",
            extra={"session_id": str(session_id), "owner_id": joiner_id},
        )
        return player.id

    def move_player(self, session_id: UUID, owner_id: str, position: Point) -> Point:
        """Move the caller's player inside the arena and check for capture."""
        target = validate_point(position.x, position.y)
        with self.registry.mutate(session_id) as session:
            final_position = session.move(
                owner_id=owner_id,
                target=target,
                capture_distance=self.policy.capture_distance,
                now=self.clock.now(),
                max_step=self.policy.max_step,
            )
        if session.winner_id is not None:
            logger.info(
                "Runner captured",
                extra={"session_id": str(session_id), "winner_id": session.winner_id},
            )
        return final_position

    def restart_session(self, session_id: UUID) -> UUID:
        """Resume a finished session with fresh starting positions."""
        with self.registry.mutate(session_id) as session:
            session.restart(
                chaser_position=random_edge_point(session.radius, self.rng),
                now=self.clock.now(),
            )
        logger.info("Session restarted", extra={"session_id": str(session_id)})
        return session_id

    def set_player_active(self, session_id: UUID, owner_id: str, active: bool) -> None:
        """Record whether the caller's player is currently connected."""
        with self.registry.mutate(session_id) as session:
            session.set_active(owner_id, active)

    def get_session(self, session_id: UUID) -> SessionSnapshot | None:
        """Return a snapshot of the session with player display names."""
        session = self.registry.get(session_id)
        if session is None:
            return None
        names = self.identities.display_names(
            [player.owner_id for player in session.players]
        )
        return _snapshot(session, names)

    def list_recent_sessions(self, limit: int | None = None) -> list[SessionSummary]:
        """Return the newest sessions; ``None`` means the configured default."""
        if limit is None:
            limit = self.recent_limit
        if limit < 0:
            raise InvalidLimit
        return self.registry.list_recent(limit)

    def list_sessions_for_owner(self, owner_id: str) -> list[UUID]:
        """Return ids of sessions an identity takes part in."""
        return self.registry.find_by_owner(owner_id)


def _snapshot(session: Session, names: dict[str, str]) -> SessionSnapshot:
    return SessionSnapshot(
        id=session.id,
        status=session.status,
        radius=session.radius,
        created_at=session.created_at,
        start_time=session.start_time,
        end_time=session.end_time,
        winner_id=session.winner_id,
        players=[
            PlayerView(
                id=player.id,
                owner_id=player.owner_id,
                owner_name=names.get(player.owner_id),
                role=player.role,
                position=player.position,
                active=player.active,
                joined_at=player.joined_at,
            )
            for player in session.players
        ],
    )
