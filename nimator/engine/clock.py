"""Time sources for the engine."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class SteppingClock:
    """Deterministic clock that advances by ``step`` on every read.

    Used for reproducible runs (tests, dry runs): the first read returns
    ``start + step``.
    """

    def __init__(self, start: datetime, step: timedelta = timedelta(milliseconds=15)) -> None:
        self._current = start
        self.step = step
        self.reads = 0

    def now(self) -> datetime:
        self._current += self.step
        self.reads += 1
        return self._current
