"""Session history for pomolog.

The log is an ordered list of sessions keyed by start time. There is no
explicit identifier: records are matched with a tolerance comparison
(``same_session`` by default), so upserts and deletes scan the list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Iterator

from pomolog.models import Session, same_session

Matcher = Callable[[Session, Session], bool]


@dataclass
class SessionLog:
    sessions: list[Session] = field(default_factory=list)

    def __iter__(self) -> Iterator[Session]:
        return iter(self.sessions)

    def __len__(self) -> int:
        return len(self.sessions)

    def sort(self) -> None:
        self.sessions.sort(key=lambda s: s.start_time)

    def latest(self) -> Session | None:
        """Sort in place and return the most recent session, or None."""
        self.sort()
        if not self.sessions:
            return None
        return self.sessions[-1]

    def count(self) -> int:
        return len(self.sessions)

    def for_date(self, day: datetime) -> SessionLog:
        """Sessions starting on *day*'s calendar date, in *day*'s time zone.

        The window is half-open: a session at the next midnight belongs to
        the next day. A naive *day* has no calendar and raises ValueError.
        """
        if day.tzinfo is None:
            raise ValueError(f"for_date needs an aware datetime, got {day!r}")
        start = day.replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)
        return SessionLog([s for s in self.sessions if start <= s.start_time < end])

    def for_range(self, start: datetime, end: datetime) -> SessionLog:
        """Sessions starting between *start* and *end*, both inclusive."""
        return SessionLog([s for s in self.sessions if start <= s.start_time <= end])

    def update(self, session: Session, match: Matcher = same_session) -> None:
        """Replace the matching record in place, or append and re-sort."""
        for i, existing in enumerate(self.sessions):
            if match(existing, session):
                self.sessions[i] = session
                return
        self.sessions.append(session)
        self.sort()

    def delete(self, session: Session, match: Matcher = same_session) -> None:
        """Remove every record matching *session*."""
        self.sessions = [s for s in self.sessions if not match(s, session)]

    @classmethod
    def from_text(cls, text: str) -> SessionLog:
        """Decode one session per line, skipping blank lines.

        Records are separated by ``\\n`` only; other Unicode line breaks are
        ordinary characters inside a record.
        """
        return cls([Session.from_text(line) for line in text.split("\n") if line.strip()])

    def to_text(self) -> str:
        """One line per session in current order, each newline-terminated."""
        return "".join(s.to_text() + "\n" for s in self.sessions)

    def to_dict(self) -> dict[str, Any]:
        return {"sessions": [s.to_dict() for s in self.sessions]}
