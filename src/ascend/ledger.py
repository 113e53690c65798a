"""State transitions on the progression document.

Every function returns a new ProgressionState and leaves its input untouched.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from ascend import i18n
from ascend.badges import BadgeDefinition, merge_unlocked, unlock_newly
from ascend.state import JournalEntry, ProgressionState, RelapseEvent
from ascend.streaks import elapsed


def start_streak(state: ProgressionState, now: datetime) -> ProgressionState:
    """Begin the first streak. No-op when a streak is already active."""
    if state.start_instant is not None:
        return state
    return replace(state, start_instant=now)


def record_relapse(
    state: ProgressionState,
    note: str | None,
    now: datetime,
    language: str | None = None,
) -> ProgressionState:
    """Log a relapse (newest first) and restart the streak at `now`.

    best_streak_seconds is left alone; call record_best_streak before this
    if the final seconds of the ending streak must count.
    """
    text = note.strip() if note else ""
    event = RelapseEvent(date=now, note=text or i18n.no_note(language))
    return replace(state, start_instant=now, relapses=[event, *state.relapses])


def record_best_streak(state: ProgressionState, now: datetime) -> ProgressionState:
    """Raise best_streak_seconds to the current streak when it is longer."""
    current = elapsed(state.start_instant, now).total_seconds
    if current > state.best_streak_seconds:
        return replace(state, best_streak_seconds=current)
    return state


def apply_unlocks(
    state: ProgressionState,
    now: datetime,
    catalog: list[BadgeDefinition] | None = None,
) -> tuple[ProgressionState, set[str]]:
    """Merge newly eligible badges into the unlocked set.

    Returns (new_state, newly_unlocked_ids).
    """
    days = elapsed(state.start_instant, now).days
    new_ids = unlock_newly(days, catalog, state.unlocked_badges)
    if not new_ids:
        return state, set()
    return replace(state, unlocked_badges=merge_unlocked(state.unlocked_badges, new_ids)), new_ids


def add_journal_entry(state: ProgressionState, content: str, now: datetime) -> ProgressionState:
    """Prepend a journal entry. Blank content is ignored."""
    if not content or not content.strip():
        return state
    entry = JournalEntry(date=now, content=content.strip())
    return replace(state, journal=[entry, *state.journal])
