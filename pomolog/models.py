"""Typed dataclasses for the pomolog data model.

Sessions and settings serialize two ways: ``from_text``/``to_text`` for the
on-disk line format, and ``to_dict`` for the JSON export.
Zero values (``None`` start time, zero durations, empty lists) mean "unset".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from pomolog.codec import (
    format_attributes,
    format_list,
    format_minutes,
    format_timestamp,
    parse_attributes,
    parse_duration,
    parse_int,
    parse_list,
    parse_timestamp,
    round_half_up,
)
from pomolog.errors import DecodeError

MATCH_TOLERANCE = timedelta(seconds=1)


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    daily_goal: int = 0
    default_break_duration: timedelta = timedelta(0)
    default_pomodoro_duration: timedelta = timedelta(0)
    default_tags: list[str] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> Settings:
        """Parse a newline-separated ``key=value`` block. Empty text is all zeros."""
        attrs = parse_attributes(text.replace("\r", " ").replace("\n", " "))
        s = cls()
        if "daily_goal" in attrs:
            s.daily_goal = parse_int(attrs["daily_goal"])
        if "default_break_duration" in attrs:
            s.default_break_duration = parse_duration(attrs["default_break_duration"])
        if "default_pomodoro_duration" in attrs:
            s.default_pomodoro_duration = parse_duration(attrs["default_pomodoro_duration"])
        if "default_tags" in attrs:
            s.default_tags = parse_list(attrs["default_tags"])
        return s

    def to_text(self) -> str:
        pairs = []
        if self.daily_goal:
            pairs.append(("daily_goal", str(self.daily_goal)))
        if self.default_break_duration:
            pairs.append(("default_break_duration", format_minutes(self.default_break_duration)))
        if self.default_pomodoro_duration:
            pairs.append(("default_pomodoro_duration", format_minutes(self.default_pomodoro_duration)))
        if self.default_tags:
            pairs.append(("default_tags", format_list(self.default_tags)))
        return "".join(format_attributes([p]) + "\n" for p in pairs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "daily_goal": self.daily_goal,
            "default_break_duration": round_half_up(self.default_break_duration.total_seconds() / 60),
            "default_pomodoro_duration": round_half_up(self.default_pomodoro_duration.total_seconds() / 60),
            "default_tags": list(self.default_tags),
        }


DEFAULT_SETTINGS = Settings(
    daily_goal=0,
    default_break_duration=timedelta(minutes=5),
    default_pomodoro_duration=timedelta(minutes=25),
    default_tags=[],
)


def merge_defaults(target: Settings, fallback: Settings) -> Settings:
    """Return *target* with every zero-valued field taken from *fallback*.

    A field cannot be configured to its zero value: ``daily_goal=0`` in a
    settings file is indistinguishable from no goal at all.
    """
    return Settings(
        daily_goal=target.daily_goal or fallback.daily_goal,
        default_break_duration=target.default_break_duration or fallback.default_break_duration,
        default_pomodoro_duration=target.default_pomodoro_duration or fallback.default_pomodoro_duration,
        default_tags=list(target.default_tags or fallback.default_tags),
    )


# ── Session ───────────────────────────────────────────────────


@dataclass
class Session:
    """One focus interval.

    ``start_time is None`` is the only inactive representation. While active,
    ``duration`` is the planned length; once finished it holds the elapsed time.
    Active/done are never stored: they are recomputed against ``now``.
    """

    start_time: datetime | None = None
    description: str = ""
    duration: timedelta = timedelta(0)
    tags: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return self.to_text()

    # State

    def is_inactive(self) -> bool:
        return self.start_time is None

    def is_active(self, now: datetime) -> bool:
        return not self.is_inactive() and now < self.end_time

    def is_done(self, now: datetime) -> bool:
        return not self.is_inactive() and now >= self.end_time

    @property
    def end_time(self) -> datetime | None:
        if self.start_time is None:
            return None
        return self.start_time + self.duration

    def remaining(self, now: datetime) -> timedelta:
        """Time left until the end; negative once done, zero when inactive."""
        if self.is_inactive():
            return timedelta(0)
        return self.end_time - now

    def remaining_minutes(self, now: datetime) -> int:
        # 30s after a 25 minute start is still 25; 30s before the end is 0.
        return round_half_up(self.remaining(now).total_seconds() / 60)

    def duration_minutes(self) -> int:
        return round_half_up(self.duration.total_seconds() / 60)

    def matches(self, other: Session) -> bool:
        return same_session(self, other)

    def apply_settings(self, settings: Settings) -> None:
        """Fill an unset duration and empty tags from *settings*."""
        if not self.duration:
            self.duration = settings.default_pomodoro_duration
        if not self.tags:
            self.tags = list(settings.default_tags)

    # Text

    @classmethod
    def from_text(cls, text: str) -> Session:
        """Decode a single record. Blank text is an inactive session."""
        stripped = text.strip()
        if not stripped:
            return cls()
        if "\n" in stripped or "\r" in stripped:
            raise DecodeError("Expected a single session record, got several lines", text)

        parts = stripped.split(None, 1)
        session = cls(start_time=parse_timestamp(parts[0]))
        if len(parts) == 1:
            return session

        attrs = parse_attributes(parts[1])
        if "description" in attrs:
            session.description = str(attrs["description"])
        if "duration" in attrs:
            session.duration = parse_duration(attrs["duration"])
        if "tags" in attrs:
            session.tags = parse_list(attrs["tags"])
        return session

    def to_text(self) -> str:
        """Encode as one line. An inactive session encodes as ``""``."""
        if self.start_time is None:
            return ""
        pairs = []
        if self.description:
            pairs.append(("description", self.description))
        if self.duration:
            pairs.append(("duration", format_minutes(self.duration)))
        if self.tags:
            pairs.append(("tags", format_list(self.tags)))
        timestamp = format_timestamp(self.start_time)
        return f"{timestamp} {format_attributes(pairs)}" if pairs else timestamp

    # JSON

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.start_time is not None:
            d["start_time"] = format_timestamp(self.start_time)
        if self.description:
            d["description"] = self.description
        if self.duration:
            d["duration"] = self.duration_minutes()
        if self.tags:
            d["tags"] = list(self.tags)
        return d


def same_session(a: Session, b: Session) -> bool:
    """Whether two records are the same logical session.

    Start times within one second of each other match; timestamps lose
    sub-second precision on disk.
    """
    if a.start_time is None or b.start_time is None:
        return a.start_time is None and b.start_time is None
    return abs(a.start_time - b.start_time) <= MATCH_TOLERANCE
