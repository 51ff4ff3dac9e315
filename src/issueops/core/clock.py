"""Clock abstraction for action timestamps.

WallClock: real wall-clock time (CLI, live bot)
FixedClock: deterministic time (tests, replays)

Context timestamps are always ISO-8601 UTC strings with millisecond
precision and a ``Z`` suffix, e.g. ``2024-05-01T12:00:00.000Z``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


def isoformat_z(t: datetime) -> str:
    """Render a timezone-aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    t = t.astimezone(timezone.utc)
    return t.strftime("%Y-%m-%dT%H:%M:%S.") + f"{t.microsecond // 1000:03d}Z"


class IClock(Protocol):
    """Clock interface used wherever a context timestamp is produced."""

    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...


class WallClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"FixedClock cannot go backwards: {seconds}")
        self._time = self._time + timedelta(seconds=seconds)


def utc_now_iso(clock: IClock | None = None) -> str:
    """Current time from *clock* (wall clock by default) as ISO-8601 UTC."""
    return isoformat_z((clock or WallClock()).now())
