from __future__ import annotations

from datetime import datetime, timedelta

from salon_agenda.application.ports.clock import ClockPort


class SystemClock(ClockPort):
    def now(self) -> datetime:
        return datetime.now()


class FixedClock(ClockPort):
    """Clock frozen at a given instant, moved only by advance()."""

    def __init__(self, current: datetime) -> None:
        self._current = current

    def now(self) -> datetime:
        return self._current

    def advance(self, minutes: int = 0, seconds: int = 0) -> datetime:
        self._current += timedelta(minutes=minutes, seconds=seconds)
        return self._current
