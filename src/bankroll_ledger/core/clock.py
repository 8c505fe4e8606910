"""Clock abstraction.

WallClock: real wall-clock time (CLI, long-running use)
FixedClock: deterministic time for tests and replays

The engine never calls datetime.now() directly, it uses its clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class IClock(Protocol):
    """Clock interface used by all time-dependent code."""

    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...


class WallClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def set_time(self, t: datetime) -> None:
        self._time = t

    def advance(self, **kwargs: float) -> None:
        """Advance by a ``timedelta(**kwargs)``."""
        self._time = self._time + timedelta(**kwargs)


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Map a configured zone name to a tzinfo.

    ``None`` means "use the process local time zone", which is what
    ``datetime.astimezone(None)`` does.
    """
    if not name:
        return None
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def local_date(ts: datetime, tz: tzinfo | None = None):
    """Calendar date of *ts* in the local (or given) time zone."""
    return ts.astimezone(tz).date()
