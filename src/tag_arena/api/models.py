"""Pydantic models for the HTTP transport."""

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """Body for creating a session."""

    radius: float | None = Field(default=None, gt=0)
    player_name: str | None = Field(default=None, max_length=64)


class JoinSessionRequest(BaseModel):
    """Body for joining a session."""

    player_name: str | None = Field(default=None, max_length=64)


class MoveRequest(BaseModel):
    """Requested position in game space."""

    x: float
    y: float


class PresenceRequest(BaseModel):
    """Liveness update for the caller's player."""

    active: bool
