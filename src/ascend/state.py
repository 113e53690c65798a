"""Progression document for ascend: dataclasses and lenient (de)serialization."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ascend.clock import format_instant, parse_instant


@dataclass(frozen=True)
class RelapseEvent:
    date: datetime
    note: str


@dataclass(frozen=True)
class JournalEntry:
    date: datetime
    content: str


@dataclass
class ProgressionState:
    start_instant: datetime | None = None
    best_streak_seconds: int = 0
    relapses: list[RelapseEvent] = field(default_factory=list)  # newest first
    journal: list[JournalEntry] = field(default_factory=list)  # newest first
    points: int = 0
    unlocked_badges: list[str] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return self.start_instant is not None


def _int_field(raw: object, default: int = 0) -> int:
    if isinstance(raw, bool):
        return default
    if isinstance(raw, (int, float)):
        return max(0, int(raw))
    return default


def _relapses_from(raw: object) -> list[RelapseEvent]:
    if not isinstance(raw, list):
        return []
    events: list[RelapseEvent] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        moment = parse_instant(item.get("date"))
        if moment is None:
            continue
        note = item.get("note")
        events.append(RelapseEvent(date=moment, note=note if isinstance(note, str) else ""))
    return events


def _journal_from(raw: object) -> list[JournalEntry]:
    if not isinstance(raw, list):
        return []
    entries: list[JournalEntry] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        moment = parse_instant(item.get("date"))
        content = item.get("content")
        if moment is None or not isinstance(content, str):
            continue
        entries.append(JournalEntry(date=moment, content=content))
    return entries


def _badges_from(raw: object) -> list[str]:
    if not isinstance(raw, list):
        return []
    seen: list[str] = []
    for item in raw:
        if isinstance(item, str) and item not in seen:
            seen.append(item)
    return seen


def state_from_dict(data: object) -> ProgressionState:
    """Build a ProgressionState from a stored document.

    Each missing or malformed field falls back to its default; bad list
    items are dropped. Never raises.
    """
    if not isinstance(data, dict):
        return ProgressionState()
    return ProgressionState(
        start_instant=parse_instant(data.get("startDate")),
        best_streak_seconds=_int_field(data.get("bestStreakSeconds")),
        relapses=_relapses_from(data.get("relapses")),
        journal=_journal_from(data.get("journal")),
        points=_int_field(data.get("points")),
        unlocked_badges=_badges_from(data.get("unlockedBadges")),
    )


def state_to_dict(state: ProgressionState) -> dict:
    """Serialize to the stored document shape (camelCase keys, ISO instants)."""
    return {
        "startDate": format_instant(state.start_instant) if state.start_instant else None,
        "bestStreakSeconds": state.best_streak_seconds,
        "relapses": [{"date": format_instant(r.date), "note": r.note} for r in state.relapses],
        "journal": [{"date": format_instant(j.date), "content": j.content} for j in state.journal],
        "points": state.points,
        "unlockedBadges": list(state.unlocked_badges),
    }
