"""Source of "now" for timestamps a broker export leaves unparseable.

Date parsing and synthetic tickets take an :class:`IClock` instead of
calling ``datetime.now()``, so tests can pin the fallback time.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class IClock(Protocol):
    def now(self) -> datetime:
        """Timezone-aware UTC datetime."""
        ...

    def now_ms(self) -> int:
        """Milliseconds since the epoch."""
        ...


class WallClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_ms(self) -> int:
        return int(self.now().timestamp() * 1000)


class SimClock:
    """Frozen clock: every call returns the instant it was built with."""

    def __init__(self, at: datetime | None = None) -> None:
        if at is not None and at.tzinfo is None:
            raise ValueError(f"SimClock needs an aware datetime, got {at!r}")
        self._at = at or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._at

    def now_ms(self) -> int:
        return int(self._at.timestamp() * 1000)
