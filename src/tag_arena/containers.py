"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from tag_arena.adapters.memory_identity_repository import InMemoryIdentityRepository
from tag_arena.adapters.memory_session_repository import InMemorySessionRepository
from tag_arena.adapters.supabase_identity_repository import (
    SupabaseIdentityRepository,
)
from tag_arena.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from tag_arena.config import Settings
from tag_arena.services.clock import SystemClock
from tag_arena.services.engine import GameplayPolicy, SessionEngine
from tag_arena.services.identity import IdentityRepository, IdentityService
from tag_arena.services.registry import SessionRegistry, SessionRepository


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_service: IdentityService
    session_engine: SessionEngine


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    session_repository, identity_repository = _build_repositories(resolved_settings)
    clock = SystemClock()
    identity_service = IdentityService(identity_repository, clock)
    session_engine = SessionEngine(
        registry=SessionRegistry(session_repository, clock),
        identities=identity_service,
        clock=clock,
        policy=GameplayPolicy(
            player_radius=resolved_settings.player_radius,
            max_step=resolved_settings.max_step,
        ),
        recent_limit=resolved_settings.recent_sessions_limit,
    )
    return AppContainer(
        settings=resolved_settings,
        identity_service=identity_service,
        session_engine=session_engine,
    )


def _build_repositories(
    settings: Settings,
) -> tuple[SessionRepository, IdentityRepository]:
    if settings.storage_backend == "memory":
        return InMemorySessionRepository(), InMemoryIdentityRepository()
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
            "for the supabase storage backend"
        )
    supabase_client = create_client(
        settings.supabase_url, settings.supabase_service_key
    )
    return (
        SupabaseSessionRepository(supabase_client),
        SupabaseIdentityRepository(supabase_client),
    )
