"""Domain models for tag sessions.

A session moves through ``waiting -> playing -> finished``; a finished session
may go back to ``playing`` only through an explicit restart. Every transition
lives on :class:`Session` so callers cannot bypass the rules.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID

from tag_arena.domain.errors import (
    AlreadyJoined,
    PlayerNotInSession,
    SessionAlreadyStarted,
    SessionFull,
    SessionNotActive,
    SessionNotFinished,
    WrongPlayerCount,
)
from tag_arena.domain.geometry import (
    ORIGIN,
    Point,
    clamp_step,
    clamp_to_circle,
    distance,
    validate_radius,
)

MAX_PLAYERS = 2


class SessionStatus(StrEnum):
    """Lifecycle status of a session."""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class PlayerRole(StrEnum):
    """Role assigned to a player when they enter a session."""

    RUNNER = "runner"
    CHASER = "it"


@dataclass
class Player:
    """A participant bound to one session for its lifetime."""

    id: UUID
    session_id: UUID
    owner_id: str
    role: PlayerRole
    position: Point
    joined_at: int
    active: bool = True


@dataclass
class Session:
    """One arena instance with at most two players."""

    id: UUID
    radius: float
    created_at: int
    status: SessionStatus = SessionStatus.WAITING
    start_time: int | None = None
    end_time: int | None = None
    winner_id: str | None = None
    players: list[Player] = field(default_factory=list)

    @classmethod
    def open(  # noqa: PLR0913
        cls,
        session_id: UUID,
        player_id: UUID,
        radius: float,
        creator_id: str,
        now: int,
    ) -> "Session":
        """Create a waiting session with the creator as runner at the center."""
        session = cls(id=session_id, radius=validate_radius(radius), created_at=now)
        session.players.append(
            Player(
                id=player_id,
                session_id=session_id,
                owner_id=creator_id,
                role=PlayerRole.RUNNER,
                position=ORIGIN,
                joined_at=now,
            )
        )
        return session

    def player_for(self, owner_id: str) -> Player | None:
        """Return the player controlled by an identity, if any."""
        for player in self.players:
            if player.owner_id == owner_id:
                return player
        return None

    def player_with_role(self, role: PlayerRole) -> Player | None:
        for player in self.players:
            if player.role == role:
                return player
        return None

    def join(
        self, player_id: UUID, owner_id: str, position: Point, now: int
    ) -> Player:
        """Add the chaser and start the game.

        Membership and capacity are checked before status, so a late joiner
        of a running game gets a conflict.
        """
        if self.player_for(owner_id) is not None:
            raise AlreadyJoined
        if len(self.players) >= MAX_PLAYERS:
            raise SessionFull
        if self.status != SessionStatus.WAITING:
            raise SessionAlreadyStarted
        player = Player(
            id=player_id,
            session_id=self.id,
            owner_id=owner_id,
            role=PlayerRole.CHASER,
            position=position,
            joined_at=now,
        )
        self.players.append(player)
        self.status = SessionStatus.PLAYING
        self.start_time = now
        return player

    def move(  # noqa: PLR0913
        self,
        owner_id: str,
        target: Point,
        capture_distance: float,
        now: int,
        max_step: float | None = None,
    ) -> Point:
        """Move the caller's player and finish the game on capture."""
        if self.status != SessionStatus.PLAYING:
            raise SessionNotActive
        player = self.player_for(owner_id)
        if player is None:
            raise PlayerNotInSession
        if max_step is not None:
            target = clamp_step(player.position, target, max_step)
        player.position = clamp_to_circle(target, self.radius)
        if self.is_capture(capture_distance):
            self._finish(now)
        return player.position

    def is_capture(self, capture_distance: float) -> bool:
        """Return true when both players are closer than the capture distance."""
        if len(self.players) != MAX_PLAYERS:
            return False
        first, second = self.players
        return distance(first.position, second.position) < capture_distance

    def restart(self, chaser_position: Point, now: int) -> None:
        """Reset positions and resume play, keeping roles unchanged."""
        if self.status != SessionStatus.FINISHED:
            raise SessionNotFinished
        if len(self.players) != MAX_PLAYERS:
            raise WrongPlayerCount
        for player in self.players:
            if player.role == PlayerRole.RUNNER:
                player.position = ORIGIN
            else:
                player.position = chaser_position
        self.status = SessionStatus.PLAYING
        self.start_time = now
        self.end_time = None
        self.winner_id = None

    def set_active(self, owner_id: str, active: bool) -> Player:
        """Update the liveness flag of the caller's player."""
        player = self.player_for(owner_id)
        if player is None:
            raise PlayerNotInSession
        player.active = active
        return player

    def summary(self) -> "SessionSummary":
        """Return the session row without its players."""
        return SessionSummary(
            id=self.id,
            status=self.status,
            radius=self.radius,
            created_at=self.created_at,
            start_time=self.start_time,
            end_time=self.end_time,
            winner_id=self.winner_id,
        )

    def _finish(self, now: int) -> None:
        chaser = self.player_with_role(PlayerRole.CHASER)
        self.status = SessionStatus.FINISHED
        self.end_time = now
        self.winner_id = chaser.owner_id if chaser else None


@dataclass(frozen=True)
class PlayerView:
    """Player state enriched with the owner's display name."""

    id: UUID
    owner_id: str
    owner_name: str | None
    role: PlayerRole
    position: Point
    active: bool
    joined_at: int


@dataclass(frozen=True)
class SessionSnapshot:
    """Consistent read of a session and its players."""

    id: UUID
    status: SessionStatus
    radius: float
    created_at: int
    start_time: int | None
    end_time: int | None
    winner_id: str | None
    players: list[PlayerView]


@dataclass(frozen=True)
class SessionSummary:
    """Session row without players, used for listings."""

    id: UUID
    status: SessionStatus
    radius: float
    created_at: int
    start_time: int | None
    end_time: int | None
    winner_id: str | None
