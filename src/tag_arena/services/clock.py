"""Wall clock abstraction."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Source of timestamps for session lifecycle events."""

    def now(self) -> int:
        """Return the current wall time in milliseconds."""


@dataclass
class SystemClock(Clock):
    """Clock backed by the system UTC time."""

    def now(self) -> int:
        return int(datetime.now(tz=UTC).timestamp() * 1000)
