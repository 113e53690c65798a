"""Streak duration calculation for ascend. Pure functions, no side effects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


@dataclass(frozen=True)
class ElapsedDuration:
    total_seconds: int
    days: int
    hours: int
    minutes: int
    seconds: int
    started: bool  # False when there is no active streak


NOT_STARTED = ElapsedDuration(total_seconds=0, days=0, hours=0, minutes=0, seconds=0, started=False)


def format_duration(total_seconds: int) -> ElapsedDuration:
    """Split whole seconds into days/hours/minutes/seconds (truncating)."""
    total = max(0, int(total_seconds))
    days, rest = divmod(total, SECONDS_PER_DAY)
    hours, rest = divmod(rest, SECONDS_PER_HOUR)
    minutes, seconds = divmod(rest, SECONDS_PER_MINUTE)
    return ElapsedDuration(
        total_seconds=total,
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        started=True,
    )


def elapsed_seconds(start: datetime | None, now: datetime) -> int:
    """Whole seconds between start and now. Clock skew clamps to 0."""
    if start is None:
        return 0
    delta = (now - start).total_seconds()
    if delta <= 0:
        return 0
    return int(delta // 1)


def elapsed(start: datetime | None, now: datetime) -> ElapsedDuration:
    """Return the elapsed streak duration.

    A missing start gives NOT_STARTED (zero duration, started=False).
    """
    if start is None:
        return NOT_STARTED
    return format_duration(elapsed_seconds(start, now))
