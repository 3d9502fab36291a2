"""FastAPI application factory."""

import logging
from uuid import UUID

from fastapi import FastAPI, Header, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tag_arena.api.models import (
    CreateSessionRequest,
    JoinSessionRequest,
    MoveRequest,
    PresenceRequest,
)
from tag_arena.app_logging import configure_logging
from tag_arena.config import parse_allowed_origins
from tag_arena.containers import AppContainer
from tag_arena.domain.errors import ErrorKind, SessionError, SessionNotFound
from tag_arena.domain.geometry import Point
from tag_arena.domain.identities import IdentityRecord
from tag_arena.domain.sessions import PlayerView, SessionSnapshot, SessionSummary

_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INVALID_INPUT: 422,
}

CREATOR_DEFAULT_NAME = "Player 1"
JOINER_DEFAULT_NAME = "Player 2"


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.allowed_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SessionError)
    async def session_error_handler(
        request: Request, exc: SessionError
    ) -> JSONResponse:
        logger.info(
            "Session operation rejected",
            extra={"path": request.url.path, "kind": exc.kind.value},
        )
        return JSONResponse(
            status_code=_STATUS_BY_KIND[exc.kind],
            content={"error": exc.kind.value, "detail": exc.message},
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/sessions", status_code=status.HTTP_201_CREATED)
    def create_session(
        body: CreateSessionRequest,
        request: Request,
        x_identity: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Create a session and join it as the runner."""
        state_container: AppContainer = request.app.state.container
        identity = _resolve_identity(
            state_container, x_identity, body.player_name or CREATOR_DEFAULT_NAME
        )
        radius = body.radius or state_container.settings.default_arena_radius
        session_id, player_id = state_container.session_engine.create_session(
            radius, identity.id
        )
        return {
            "session_id": str(session_id),
            "player_id": str(player_id),
            "owner_id": identity.id,
        }

    @app.post("/sessions/{session_id}/join")
    def join_session(
        session_id: UUID,
        body: JoinSessionRequest,
        request: Request,
        x_identity: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Join a waiting session as the chaser."""
        state_container: AppContainer = request.app.state.container
        identity = _resolve_identity(
            state_container, x_identity, body.player_name or JOINER_DEFAULT_NAME
        )
        player_id = state_container.session_engine.join_session(
            session_id, identity.id
        )
        return {"player_id": str(player_id), "owner_id": identity.id}

    @app.post("/sessions/{session_id}/move")
    def move_player(
        session_id: UUID,
        body: MoveRequest,
        request: Request,
        x_owner_id: str = Header(),
    ) -> dict[str, float]:
        """Move the caller's player and return the stored position."""
        state_container: AppContainer = request.app.state.container
        position = state_container.session_engine.move_player(
            session_id, x_owner_id, Point(body.x, body.y)
        )
        return {"x": position.x, "y": position.y}

    @app.post("/sessions/{session_id}/restart")
    def restart_session(session_id: UUID, request: Request) -> dict[str, str]:
        """Restart a finished session."""
        state_container: AppContainer = request.app.state.container
        restarted = state_container.session_engine.restart_session(session_id)
        return {"session_id": str(restarted)}

    @app.post("/sessions/{session_id}/presence")
    def update_presence(
        session_id: UUID,
        body: PresenceRequest,
        request: Request,
        x_owner_id: str = Header(),
    ) -> dict[str, object]:
        """Mark the caller's player as connected or disconnected."""
        state_container: AppContainer = request.app.state.container
        state_container.session_engine.set_player_active(
            session_id, x_owner_id, body.active
        )
        return {"active": body.active}

    @app.get("/sessions/{session_id}")
    def get_session(session_id: UUID, request: Request) -> dict[str, object]:
        """Return the session with its players."""
        state_container: AppContainer = request.app.state.container
        snapshot = state_container.session_engine.get_session(session_id)
        if snapshot is None:
            raise SessionNotFound
        return _serialize_snapshot(snapshot)

    @app.get("/sessions")
    def list_recent_sessions(
        request: Request, limit: int | None = Query(default=None, ge=0)
    ) -> dict[str, object]:
        """Return the most recently created sessions."""
        state_container: AppContainer = request.app.state.container
        summaries = state_container.session_engine.list_recent_sessions(limit)
        return {"sessions": [_serialize_summary(summary) for summary in summaries]}

    @app.get("/owners/{owner_id}/sessions")
    def list_owner_sessions(owner_id: str, request: Request) -> dict[str, object]:
        """Return ids of sessions an identity takes part in."""
        state_container: AppContainer = request.app.state.container
        session_ids = state_container.session_engine.list_sessions_for_owner(owner_id)
        return {"session_ids": [str(session_id) for session_id in session_ids]}

    return app


def _resolve_identity(
    state_container: AppContainer, external_id: str | None, name: str
) -> IdentityRecord:
    """Resolve the caller, falling back to an anonymous identity."""
    if external_id:
        return state_container.identity_service.ensure_identity(external_id, name)
    return state_container.identity_service.anonymous_identity(name)


def _serialize_summary(summary: SessionSummary) -> dict[str, object]:
    return {
        "id": str(summary.id),
        "status": summary.status.value,
        "radius": summary.radius,
        "created_at": summary.created_at,
        "start_time": summary.start_time,
        "end_time": summary.end_time,
        "winner_id": summary.winner_id,
    }


def _serialize_player(player: PlayerView) -> dict[str, object]:
    return {
        "id": str(player.id),
        "owner_id": player.owner_id,
        "name": player.owner_name,
        "role": player.role.value,
        "position": {"x": player.position.x, "y": player.position.y},
        "active": player.active,
        "joined_at": player.joined_at,
    }


def _serialize_snapshot(snapshot: SessionSnapshot) -> dict[str, object]:
    return {
        "id": str(snapshot.id),
        "status": snapshot.status.value,
        "radius": snapshot.radius,
        "created_at": snapshot.created_at,
        "start_time": snapshot.start_time,
        "end_time": snapshot.end_time,
        "winner_id": snapshot.winner_id,
        "players": [_serialize_player(player) for player in snapshot.players],
    }
