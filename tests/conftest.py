"""Shared test fixtures."""

import random
from dataclasses import dataclass

import pytest

from tag_arena.adapters.memory_identity_repository import InMemoryIdentityRepository
from tag_arena.adapters.memory_session_repository import InMemorySessionRepository
from tag_arena.config import Settings
from tag_arena.containers import AppContainer, build_container
from tag_arena.services.clock import Clock
from tag_arena.services.engine import SessionEngine
from tag_arena.services.identity import IdentityService
from tag_arena.services.registry import SessionRegistry


@dataclass
class FakeClock(Clock):
    """Clock that advances by a fixed step on every read."""

    current: int = 1_700_000_000_000
    step: int = 1

    def now(self) -> int:
        self.current += self.step
        return self.current


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns ``value``."""

    def __init__(self, value: float = 0.5) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def identity_repository() -> InMemoryIdentityRepository:
    return InMemoryIdentityRepository()


@pytest.fixture
def identity_service(
    identity_repository: InMemoryIdentityRepository, clock: FakeClock
) -> IdentityService:
    return IdentityService(identity_repository, clock)


@pytest.fixture
def registry(
    session_repository: InMemorySessionRepository, clock: FakeClock
) -> SessionRegistry:
    return SessionRegistry(session_repository, clock)


@pytest.fixture
def rng() -> FixedRandom:
    # 0.5 of a full turn puts the chaser at (-radius, 0).
    return FixedRandom(0.5)


@pytest.fixture
def engine(
    registry: SessionRegistry,
    identity_service: IdentityService,
    clock: FakeClock,
    rng: FixedRandom,
) -> SessionEngine:
    return SessionEngine(
        registry=registry,
        identities=identity_service,
        clock=clock,
        rng=rng,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, storage_backend="memory")


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings)
