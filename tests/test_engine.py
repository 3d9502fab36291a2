"""Tests for the session engine operations."""

import math
import random
from uuid import uuid4

import pytest

from tag_arena.domain.errors import (
    AlreadyJoined,
    ErrorKind,
    InvalidLimit,
    InvalidPosition,
    InvalidRadius,
    PlayerNotInSession,
    SessionError,
    SessionFull,
    SessionNotActive,
    SessionNotFinished,
    SessionNotFound,
)
from tag_arena.domain.geometry import ORIGIN, Point
from tag_arena.domain.sessions import PlayerRole, SessionStatus
from tag_arena.services.engine import GameplayPolicy, SessionEngine
from tests.conftest import FixedRandom


def _start_game(engine: SessionEngine, radius: float = 250.0):
    session_id, _ = engine.create_session(radius, "alice")
    engine.join_session(session_id, "bob")
    return session_id


def _player(engine: SessionEngine, session_id, owner_id: str):
    snapshot = engine.get_session(session_id)
    return next(player for player in snapshot.players if player.owner_id == owner_id)


def test_create_session_starts_waiting_with_runner(engine: SessionEngine) -> None:
    session_id, player_id = engine.create_session(250.0, "alice")

    snapshot = engine.get_session(session_id)
    assert snapshot is not None
    assert snapshot.status == SessionStatus.WAITING
    assert snapshot.radius == 250.0
    assert snapshot.start_time is None
    assert [player.id for player in snapshot.players] == [player_id]
    runner = snapshot.players[0]
    assert runner.role == PlayerRole.RUNNER
    assert runner.position == ORIGIN
    assert runner.owner_id == "alice"


@pytest.mark.parametrize("radius", [0.0, -1.0, math.nan])
def test_create_session_rejects_invalid_radius(
    engine: SessionEngine, radius: float
) -> None:
    with pytest.raises(InvalidRadius) as exc_info:
        engine.create_session(radius, "alice")

    assert exc_info.value.kind == ErrorKind.INVALID_INPUT
    assert engine.list_recent_sessions() == []


def test_join_places_chaser_on_boundary_and_starts(engine: SessionEngine) -> None:
    session_id, _ = engine.create_session(250.0, "alice")

    chaser_id = engine.join_session(session_id, "bob")

    snapshot = engine.get_session(session_id)
    assert snapshot.status == SessionStatus.PLAYING
    assert snapshot.start_time is not None
    chaser = _player(engine, session_id, "bob")
    assert chaser.id == chaser_id
    assert chaser.role == PlayerRole.CHASER
    assert chaser.position.norm() == pytest.approx(250.0)


def test_join_unknown_session_is_not_found(engine: SessionEngine) -> None:
    with pytest.raises(SessionNotFound) as exc_info:
        engine.join_session(uuid4(), "bob")

    assert exc_info.value.kind == ErrorKind.NOT_FOUND


def test_join_twice_by_same_identity_fails_with_conflict(
    engine: SessionEngine,
) -> None:
    session_id, _ = engine.create_session(250.0, "alice")
    engine.join_session(session_id, "bob")

    with pytest.raises(SessionError) as exc_info:
        engine.join_session(session_id, "bob")

    assert isinstance(exc_info.value, AlreadyJoined)
    assert exc_info.value.kind == ErrorKind.CONFLICT
    players = engine.get_session(session_id).players
    assert [player.owner_id for player in players] == ["alice", "bob"]


def test_creator_cannot_join_own_session(engine: SessionEngine) -> None:
    session_id, _ = engine.create_session(250.0, "alice")

    with pytest.raises(AlreadyJoined):
        engine.join_session(session_id, "alice")

    assert engine.get_session(session_id).status == SessionStatus.WAITING


def test_third_join_fails_with_conflict(engine: SessionEngine) -> None:
    session_id = _start_game(engine)

    with pytest.raises(SessionFull) as exc_info:
        engine.join_session(session_id, "carol")

    assert exc_info.value.kind == ErrorKind.CONFLICT
    assert len(engine.get_session(session_id).players) == 2


def test_move_clamps_requested_position(engine: SessionEngine) -> None:
    session_id = _start_game(engine)

    position = engine.move_player(session_id, "alice", Point(260.0, 0.0))

    assert position.x == pytest.approx(250.0)
    assert position.y == pytest.approx(0.0)
    stored = _player(engine, session_id, "alice").position
    assert stored == position


def test_move_rejects_non_finite_position(engine: SessionEngine) -> None:
    session_id = _start_game(engine)

    with pytest.raises(InvalidPosition) as exc_info:
        engine.move_player(session_id, "alice", Point(math.nan, 0.0))

    assert exc_info.value.kind == ErrorKind.INVALID_INPUT
    assert _player(engine, session_id, "alice").position == ORIGIN


def test_move_failures(engine: SessionEngine) -> None:
    waiting_id, _ = engine.create_session(250.0, "alice")
    playing_id = _start_game(engine)

    with pytest.raises(SessionNotFound):
        engine.move_player(uuid4(), "alice", Point(1.0, 1.0))
    with pytest.raises(SessionNotActive):
        engine.move_player(waiting_id, "alice", Point(1.0, 1.0))
    with pytest.raises(PlayerNotInSession):
        engine.move_player(playing_id, "mallory", Point(1.0, 1.0))


def test_collision_finishes_session_for_chaser(engine: SessionEngine) -> None:
    session_id = _start_game(engine)
    engine.move_player(session_id, "alice", Point(5.0, 0.0))

    engine.move_player(session_id, "bob", Point(0.0, 0.0))

    snapshot = engine.get_session(session_id)
    assert snapshot.status == SessionStatus.FINISHED
    assert snapshot.winner_id == "bob"
    assert snapshot.end_time is not None


def test_no_move_succeeds_after_capture(engine: SessionEngine) -> None:
    session_id = _start_game(engine)
    engine.move_player(session_id, "bob", Point(10.0, 0.0))

    for owner in ("alice", "bob"):
        with pytest.raises(SessionNotActive):
            engine.move_player(session_id, owner, Point(-100.0, 0.0))

    assert _player(engine, session_id, "bob").position == Point(10.0, 0.0)


def test_restart_resets_finished_session(
    engine: SessionEngine, rng: FixedRandom
) -> None:
    session_id = _start_game(engine)
    engine.move_player(session_id, "alice", Point(5.0, 0.0))
    engine.move_player(session_id, "bob", Point(0.0, 0.0))
    finished = engine.get_session(session_id)
    rng.value = 0.25

    assert engine.restart_session(session_id) == session_id

    snapshot = engine.get_session(session_id)
    assert snapshot.status == SessionStatus.PLAYING
    assert snapshot.start_time > finished.start_time
    assert snapshot.end_time is None
    assert snapshot.winner_id is None
    assert _player(engine, session_id, "alice").position == ORIGIN
    chaser_position = _player(engine, session_id, "bob").position
    assert chaser_position.x == pytest.approx(0.0, abs=1e-9)
    assert chaser_position.y == pytest.approx(250.0)


def test_restart_failures(engine: SessionEngine) -> None:
    session_id = _start_game(engine)

    with pytest.raises(SessionNotFound):
        engine.restart_session(uuid4())
    with pytest.raises(SessionNotFinished) as exc_info:
        engine.restart_session(session_id)

    assert exc_info.value.kind == ErrorKind.INVALID_STATE


def test_roles_survive_repeated_restarts(engine: SessionEngine) -> None:
    session_id = _start_game(engine)

    for _ in range(3):
        chaser = _player(engine, session_id, "bob").position
        engine.move_player(session_id, "alice", chaser)
        assert engine.get_session(session_id).status == SessionStatus.FINISHED
        engine.restart_session(session_id)

    roles = {
        player.owner_id: player.role
        for player in engine.get_session(session_id).players
    }
    assert roles == {"alice": PlayerRole.RUNNER, "bob": PlayerRole.CHASER}


def test_random_moves_stay_inside_arena(engine: SessionEngine) -> None:
    session_id = _start_game(engine, radius=100.0)
    rng = random.Random(1234)

    for _ in range(200):
        snapshot = engine.get_session(session_id)
        if snapshot.status == SessionStatus.FINISHED:
            engine.restart_session(session_id)
        owner = rng.choice(["alice", "bob"])
        target = Point(rng.uniform(-1000, 1000), rng.uniform(-1000, 1000))
        engine.move_player(session_id, owner, target)
        for player in engine.get_session(session_id).players:
            assert player.position.norm() <= 100.0 + 1e-9


def test_get_session_is_read_only(engine: SessionEngine) -> None:
    session_id = _start_game(engine)

    first = engine.get_session(session_id)
    second = engine.get_session(session_id)

    assert first == second
    assert engine.get_session(uuid4()) is None


def test_get_session_enriches_players_with_names(
    engine: SessionEngine, identity_service
) -> None:
    alice = identity_service.ensure_identity("ext-alice", "Alice")
    bob = identity_service.anonymous_identity("Player 2")
    session_id, _ = engine.create_session(250.0, alice.id)
    engine.join_session(session_id, bob.id)

    names = [player.owner_name for player in engine.get_session(session_id).players]

    assert names == ["Alice", "Player 2"]


def test_step_limit_policy(registry, identity_service, clock, rng) -> None:
    engine = SessionEngine(
        registry=registry,
        identities=identity_service,
        clock=clock,
        policy=GameplayPolicy(max_step=3.0),
        rng=rng,
    )
    session_id = _start_game(engine)

    position = engine.move_player(session_id, "alice", Point(0.0, 100.0))

    assert position.x == pytest.approx(0.0)
    assert position.y == pytest.approx(3.0)


def test_custom_player_radius_changes_capture_distance(
    registry, identity_service, clock, rng
) -> None:
    engine = SessionEngine(
        registry=registry,
        identities=identity_service,
        clock=clock,
        policy=GameplayPolicy(player_radius=5.0),
        rng=rng,
    )
    session_id = _start_game(engine)

    engine.move_player(session_id, "bob", Point(15.0, 0.0))
    assert engine.get_session(session_id).status == SessionStatus.PLAYING

    engine.move_player(session_id, "bob", Point(9.0, 0.0))
    assert engine.get_session(session_id).status == SessionStatus.FINISHED


def test_listings(engine: SessionEngine) -> None:
    first, _ = engine.create_session(250.0, "alice")
    second, _ = engine.create_session(300.0, "carol")
    engine.join_session(second, "alice")

    recent = engine.list_recent_sessions()

    assert [summary.id for summary in recent] == [second, first]
    assert [summary.id for summary in engine.list_recent_sessions(1)] == [second]
    assert engine.list_sessions_for_owner("alice") == [second, first]
    assert engine.list_sessions_for_owner("carol") == [second]
    assert engine.list_sessions_for_owner("nobody") == []


def test_recent_listing_limit_bounds(engine: SessionEngine) -> None:
    for owner in ("alice", "bob", "carol"):
        engine.create_session(250.0, owner)

    assert engine.list_recent_sessions(0) == []
    assert len(engine.list_recent_sessions(None)) == 3
    with pytest.raises(InvalidLimit) as excinfo:
        engine.list_recent_sessions(-1)
    assert excinfo.value.kind == ErrorKind.INVALID_INPUT


def test_set_player_active(engine: SessionEngine) -> None:
    session_id = _start_game(engine)

    engine.set_player_active(session_id, "bob", False)

    assert _player(engine, session_id, "bob").active is False
    assert engine.get_session(session_id).status == SessionStatus.PLAYING
    with pytest.raises(PlayerNotInSession):
        engine.set_player_active(session_id, "mallory", False)
