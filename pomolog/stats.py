"""Summaries over the session log."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pomolog.history import SessionLog
from pomolog.models import Settings


def daily_progress(log: SessionLog, settings: Settings, now: datetime) -> dict[str, Any]:
    """Completed sessions today against the daily goal.

    Only sessions that are done count; the one still running does not.
    ``remaining`` is None when no goal is set.
    """
    today = log.for_date(now)
    completed = sum(1 for s in today if s.is_done(now))
    goal = settings.daily_goal
    return {
        "date": now.date().isoformat(),
        "completed": completed,
        "goal": goal,
        "remaining": max(0, goal - completed) if goal else None,
        "goal_reached": bool(goal) and completed >= goal,
    }


def summarize(log: SessionLog, now: datetime, days: int = 7) -> dict[str, Any]:
    """Session statistics for the last *days* days."""
    recent = [s for s in log.for_range(now - timedelta(days=days), now) if s.is_done(now)]

    if not recent:
        return {
            "total_sessions": 0,
            "total_minutes": 0,
            "avg_session_minutes": 0,
            "tags": {},
        }

    total_minutes = sum(s.duration.total_seconds() for s in recent) / 60
    tags: dict[str, int] = {}
    for s in recent:
        for tag in s.tags:
            tags[tag] = tags.get(tag, 0) + 1

    return {
        "total_sessions": len(recent),
        "total_minutes": round(total_minutes, 1),
        "avg_session_minutes": round(total_minutes / len(recent), 1),
        "tags": tags,
    }
