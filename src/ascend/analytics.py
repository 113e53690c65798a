"""Relapse analytics for ascend.

Pure functions over the relapse ledger: monthly histogram, average streak
length, relapse rate and the month calendar grid. No side effects, no DB
access - accepts raw data as input.
"""

from __future__ import annotations

import calendar
import math
from collections.abc import Iterable
from datetime import MAXYEAR, MINYEAR, date, datetime, timezone

from ascend.state import RelapseEvent
from ascend.streaks import SECONDS_PER_DAY

HISTOGRAM_MONTHS = 6
RATE_PERIOD_SECONDS = 30 * SECONDS_PER_DAY
MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _utc_date(moment: datetime) -> date:
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move (year, month) by `offset` months. shift_month(2024, 1, -1) -> (2023, 12)."""
    index = year * 12 + (month - 1) + offset
    return (index // 12, index % 12 + 1)


def monthly_histogram(relapses: Iterable[RelapseEvent], now: datetime) -> list[dict]:
    """Relapse counts for the 6 calendar months ending at now's month, oldest first.

    Each entry: {"label": "Mar", "year": 2024, "month": 3, "count": 2}.
    """
    counts: dict[tuple[int, int], int] = {}
    for event in relapses:
        day = _utc_date(event.date)
        counts[(day.year, day.month)] = counts.get((day.year, day.month), 0) + 1

    current = _utc_date(now)
    buckets: list[dict] = []
    for offset in range(HISTOGRAM_MONTHS - 1, -1, -1):
        year, month = shift_month(current.year, current.month, -offset)
        buckets.append({
            "label": MONTH_LABELS[month - 1],
            "year": year,
            "month": month,
            "count": counts.get((year, month), 0),
        })
    return buckets


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def avg_streak_days(relapses: Iterable[RelapseEvent], current_days: int) -> int:
    """Rounded mean gap in days between consecutive relapses.

    With fewer than two relapses there is no interval to average, so the
    current streak length in days is returned instead.
    """
    ordered = sorted(relapses, key=lambda r: r.date)
    if len(ordered) < 2:
        return current_days
    total_days = 0.0
    for prev, curr in zip(ordered, ordered[1:]):
        total_days += (curr.date - prev.date).total_seconds() / SECONDS_PER_DAY
    return _round_half_up(total_days / (len(ordered) - 1))


def relapse_date_set(relapses: Iterable[RelapseEvent]) -> set[date]:
    """Calendar days (UTC) on which at least one relapse was logged."""
    return {_utc_date(event.date) for event in relapses}


def relapse_rate(relapse_count: int, elapsed_seconds: int) -> float:
    """Relapses per elapsed 30-day period of the current streak (at least one period).

    The period count is a ceiling, so the rate drops in steps at each 30-day boundary.
    """
    periods = max(1, math.ceil(max(0, elapsed_seconds) / RATE_PERIOD_SECONDS))
    return relapse_count / periods


def parse_month(month: str | None, now: datetime) -> tuple[int, int] | None:
    """Parse 'YYYY-MM' into (year, month). Returns None when malformed or out of range.

    An empty value means the month containing `now` in local time, which is
    the month the calendar's "today" falls in.
    """
    if not month:
        local = now.astimezone()
        return (local.year, local.month)
    try:
        year_text, month_text = month.split("-")
        year, month_num = int(year_text), int(month_text)
    except ValueError:
        return None
    if not 1 <= month_num <= 12 or not MINYEAR <= year <= MAXYEAR:
        return None
    return (year, month_num)


def calendar_grid(year: int, month: int) -> list[date | None]:
    """Cells for a month view: None padding for weekdays before the 1st (Sunday first), then each day."""
    first_weekday, days_in_month = calendar.monthrange(year, month)
    padding = (first_weekday + 1) % 7  # monthrange uses Monday=0
    cells: list[date | None] = [None] * padding
    cells.extend(date(year, month, d) for d in range(1, days_in_month + 1))
    return cells


def aggregate(
    relapses: list[RelapseEvent],
    now: datetime,
    current_days: int = 0,
    elapsed_seconds: int = 0,
) -> dict:
    """Bundle every analytics view of the ledger."""
    return {
        "monthly_histogram": monthly_histogram(relapses, now),
        "avg_streak_days": avg_streak_days(relapses, current_days),
        "relapse_dates": relapse_date_set(relapses),
        "relapse_rate": relapse_rate(len(relapses), elapsed_seconds),
        "total_relapses": len(relapses),
    }
