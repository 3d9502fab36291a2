"""Supabase-backed session repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from tag_arena.domain.geometry import Point
from tag_arena.domain.sessions import (
    Player,
    PlayerRole,
    Session,
    SessionStatus,
    SessionSummary,
)
from tag_arena.services.registry import SessionRepository

_GAME_COLUMNS = "id, status, game_radius, created_at, start_time, end_time, winner_id"
_PLAYER_COLUMNS = "id, game_id, user_id, role, position, is_active, joined_at"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation over the ``games`` and ``players`` tables.

    Writes are not transactional across tables; callers are expected to hold
    the registry's per-session lock around every write.
    """

    client: Client

    def add_session(self, session: Session) -> None:
        """Insert the game row followed by its player rows."""
        response = self.client.table("games").insert(_game_row(session)).execute()
        if not response.data:
            raise RuntimeError("Failed to create game")
        players_response = (
            self.client.table("players")
            .insert([_player_row(player) for player in session.players])
            .execute()
        )
        if not players_response.data:
            self.client.table("games").delete().eq("id", str(session.id)).execute()
            raise RuntimeError("Failed to create game players")

    def get_session(self, session_id: UUID) -> Session | None:
        """Return a game with its players, if present."""
        response = (
            self.client.table("games")
            .select(_GAME_COLUMNS)
            .eq("id", str(session_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        players_response = (
            self.client.table("players")
            .select(_PLAYER_COLUMNS)
            .eq("game_id", str(session_id))
            .order("joined_at")
            .execute()
        )
        players = [_player_from_row(row) for row in players_response.data or []]
        return _session_from_row(response.data[0], players)

    def save_session(self, session: Session) -> None:
        """Update the game row and upsert every player row."""
        row = _game_row(session)
        row.pop("id")
        row.pop("created_at")
        self.client.table("games").update(row).eq("id", str(session.id)).execute()
        self.client.table("players").upsert(
            [_player_row(player) for player in session.players]
        ).execute()

    def list_recent_sessions(self, limit: int) -> list[SessionSummary]:
        """Return recent games ordered by creation time."""
        response = (
            self.client.table("games")
            .select(_GAME_COLUMNS)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_session_from_row(row, []).summary() for row in response.data or []]

    def list_session_ids_for_owner(self, owner_id: str) -> list[UUID]:
        """Return ids of games the owner has a player in."""
        response = (
            self.client.table("players")
            .select("game_id, joined_at")
            .eq("user_id", owner_id)
            .order("joined_at", desc=True)
            .execute()
        )
        session_ids: list[UUID] = []
        for row in response.data or []:
            session_id = UUID(row["game_id"])
            if session_id not in session_ids:
                session_ids.append(session_id)
        return session_ids


def _game_row(session: Session) -> dict[str, object]:
    return {
        "id": str(session.id),
        "status": session.status.value,
        "game_radius": session.radius,
        "created_at": session.created_at,
        "start_time": session.start_time,
        "end_time": session.end_time,
        "winner_id": session.winner_id,
    }


def _player_row(player: Player) -> dict[str, object]:
    return {
        "id": str(player.id),
        "game_id": str(player.session_id),
        "user_id": player.owner_id,
        "role": player.role.value,
        "position": {"x": player.position.x, "y": player.position.y},
        "is_active": player.active,
        "joined_at": player.joined_at,
    }


def _session_from_row(row: dict[str, object], players: list[Player]) -> Session:
    return Session(
        id=UUID(str(row["id"])),
        radius=float(row["game_radius"]),
        created_at=int(row["created_at"]),
        status=SessionStatus(row["status"]),
        start_time=row.get("start_time"),
        end_time=row.get("end_time"),
        winner_id=row.get("winner_id"),
        players=players,
    )


def _player_from_row(row: dict[str, object]) -> Player:
    position = row["position"]
    return Player(
        id=UUID(str(row["id"])),
        session_id=UUID(str(row["game_id"])),
        owner_id=str(row["user_id"]),
        role=PlayerRole(row["role"]),
        position=Point(float(position["x"]), float(position["y"])),
        joined_at=int(row["joined_at"]),
        active=bool(row["is_active"]),
    )
