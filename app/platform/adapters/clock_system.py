from datetime import datetime, timedelta, timezone
from app.platform.ports.clock import ClockPort

class SystemClock(ClockPort):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

class FrozenClock(ClockPort):
    """Clock that only moves when told to. Used by tests and simulations."""

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set(self, when: datetime) -> None:
        self._now = when

    def advance(self, **delta) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now
