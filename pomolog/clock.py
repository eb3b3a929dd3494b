"""Time sources for pomolog.

Every time-dependent query takes the current instant from a clock, a
zero-argument callable returning an aware datetime. Production code uses
``system_clock``; tests substitute a ``FrozenClock`` and advance it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current wall-clock time in the local time zone."""
    return datetime.now(timezone.utc).astimezone()


class FrozenClock:
    """A clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        if start.tzinfo is None:
            raise ValueError("FrozenClock needs an aware datetime")
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> datetime:
        self.current = self.current + delta
        return self.current
