"""MCP server for ascend.

Exposes read-only streak, badge and analytics views as MCP tools.
Run via: python3 -m ascend.mcp_server
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from ascend.analytics import aggregate, calendar_grid, parse_month
from ascend.clock import format_instant, utc_now

mcp = FastMCP(name="ascend")


def _get_db():
    from ascend.db import Database
    return Database()


def _load_state(db):
    from ascend.db import ProgressionStore
    return ProgressionStore(db).load()


def _language() -> str:
    from ascend.config import get_language
    return get_language()


@mcp.tool()
def get_streak() -> dict[str, Any]:
    """Get the current streak: elapsed time, rank, points and best streak."""
    from ascend.points import points_breakdown
    from ascend.ranks import next_rank, resolve_rank
    from ascend.streaks import elapsed

    db = _get_db()
    try:
        state = _load_state(db)
    finally:
        db.close()
    if state.start_instant is None:
        return {"started": False, "message": "No active streak. Run: ascend start"}
    language = _language()
    now = utc_now()
    duration = elapsed(state.start_instant, now)
    rank = resolve_rank(duration.days)
    upcoming = next_rank(duration.days)
    return {
        "started": True,
        "start": format_instant(state.start_instant),
        "days": duration.days,
        "hours": duration.hours,
        "minutes": duration.minutes,
        "seconds": duration.seconds,
        "rank": rank.display_name(language) if rank else None,
        "next_rank": upcoming.display_name(language) if upcoming else None,
        "days_to_next_rank": upcoming.min_days - duration.days if upcoming else 0,
        "points": points_breakdown(duration.total_seconds, duration.days),
        "best_streak_seconds": max(state.best_streak_seconds, duration.total_seconds),
        "relapse_count": len(state.relapses),
    }


@mcp.tool()
def get_badges() -> dict[str, Any]:
    """Get all badges with unlock status."""
    from ascend import i18n
    from ascend.badges import BADGES

    db = _get_db()
    try:
        state = _load_state(db)
    finally:
        db.close()
    language = _language()
    unlocked = set(state.unlocked_badges)
    result = [
        {
            "id": badge.id,
            "icon": badge.icon,
            "name": i18n.badge_name(badge.id, language),
            "description": i18n.badge_description(badge.id, language),
            "days": badge.days,
            "unlocked": badge.id in unlocked,
        }
        for badge in BADGES
    ]
    return {"badges": result, "unlocked_count": len(unlocked), "total_count": len(result)}


@mcp.tool()
def get_analytics(month: str = "") -> dict[str, Any]:
    """Get relapse analytics and the calendar for a month (YYYY-MM, default current)."""
    from ascend.streaks import elapsed

    now = utc_now()
    parsed = parse_month(month, now)
    if parsed is None:
        return {"error": "Invalid month. Use YYYY-MM."}
    year, month_num = parsed

    db = _get_db()
    try:
        state = _load_state(db)
    finally:
        db.close()
    duration = elapsed(state.start_instant, now)
    data = aggregate(
        state.relapses, now, current_days=duration.days, elapsed_seconds=duration.total_seconds
    )
    relapse_days = data.pop("relapse_dates")
    data["relapse_rate"] = round(data["relapse_rate"], 2)
    data["calendar"] = {
        "year": year,
        "month": month_num,
        "cells": [
            None if cell is None else {"date": cell.isoformat(), "relapse": cell in relapse_days}
            for cell in calendar_grid(year, month_num)
        ],
    }
    data["relapse_dates"] = sorted(d.isoformat() for d in relapse_days)
    return data


@mcp.tool()
def get_history(limit: int = 20) -> dict[str, Any]:
    """Get the most recent relapses (newest first)."""
    db = _get_db()
    try:
        state = _load_state(db)
    finally:
        db.close()
    relapses = [
        {"date": format_instant(r.date), "note": r.note}
        for r in state.relapses[: max(0, limit)]
    ]
    return {"relapses": relapses, "total": len(state.relapses)}


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
