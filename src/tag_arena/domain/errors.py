"""Typed failures raised by session operations.

Hierarchy:
- SessionError (base, carries an ErrorKind)
  - NOT_FOUND: SessionNotFound, PlayerNotInSession
  - INVALID_STATE: SessionAlreadyStarted, SessionNotActive, SessionNotFinished
  - CONFLICT: AlreadyJoined, SessionFull, WrongPlayerCount, SessionAlreadyExists
  - INVALID_INPUT: InvalidRadius, InvalidPosition
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Broad category of a failed operation."""

    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"


class SessionError(Exception):
    """Base exception for all session operation failures."""

    kind: ErrorKind = ErrorKind.INVALID_STATE
    default_message = "Session operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class SessionNotFound(SessionError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Game not found"


class PlayerNotInSession(SessionError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Player not in game"


class SessionAlreadyStarted(SessionError):
    kind = ErrorKind.INVALID_STATE
    default_message = "Game already started"


class SessionNotActive(SessionError):
    kind = ErrorKind.INVALID_STATE
    default_message = "Game not active"


class SessionNotFinished(SessionError):
    kind = ErrorKind.INVALID_STATE
    default_message = "Game is not finished"


class AlreadyJoined(SessionError):
    kind = ErrorKind.CONFLICT
    default_message = "Already in this game"


class SessionFull(SessionError):
    kind = ErrorKind.CONFLICT
    default_message = "Game is full"


class WrongPlayerCount(SessionError):
    kind = ErrorKind.CONFLICT
    default_message = "Need exactly 2 players to restart"


class SessionAlreadyExists(SessionError):
    kind = ErrorKind.CONFLICT
    default_message = "Game id already in use"


class InvalidRadius(SessionError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "Arena radius must be positive"


class InvalidPosition(SessionError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "Position must have finite coordinates"


class InvalidLimit(SessionError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "Limit must not be negative"
