"""Streak session: owns the progression state and re-derives it on every tick.

The session is the single writer of ProgressionState. Ticks (1 Hz) and user
actions both go through the same lock; after every state change the
document is saved and subscribers receive a TickDelta.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable

from ascend import ledger
from ascend.badges import BADGES, BadgeDefinition
from ascend.clock import TICK_SECONDS, Ticker, utc_now
from ascend.db import StateStore
from ascend.points import compute_points
from ascend.ranks import RANKS, RankDefinition, next_rank, resolve_rank
from ascend.state import ProgressionState
from ascend.streaks import ElapsedDuration, elapsed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    now: datetime
    elapsed: ElapsedDuration
    rank: RankDefinition | None
    next_rank: RankDefinition | None
    points: int
    best_streak_seconds: int
    unlocked_badges: tuple[str, ...]
    relapse_count: int


@dataclass(frozen=True)
class TickDelta:
    snapshot: Snapshot
    newly_unlocked: frozenset[str]
    best_streak_changed: bool

    @property
    def changed(self) -> bool:
        return bool(self.newly_unlocked) or self.best_streak_changed


Subscriber = Callable[[TickDelta], None]


class StreakSession:
    def __init__(
        self,
        store: StateStore,
        clock: Callable[[], datetime] = utc_now,
        ranks: list[RankDefinition] | None = None,
        catalog: list[BadgeDefinition] | None = None,
        language: str | None = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.ranks = RANKS if ranks is None else ranks
        self.catalog = BADGES if catalog is None else catalog
        self.language = language
        self.state = store.load()
        self._lock = threading.RLock()
        self._subscribers: list[Subscriber] = []
        self._ticker: Ticker | None = None

    # ── Reads ────────────────────────────────────────────────────────────

    def snapshot(self, now: datetime | None = None) -> Snapshot:
        now = now or self.clock()
        state = self.state
        duration = elapsed(state.start_instant, now)
        return Snapshot(
            now=now,
            elapsed=duration,
            rank=resolve_rank(duration.days, self.ranks),
            next_rank=next_rank(duration.days, self.ranks),
            points=compute_points(duration.total_seconds, duration.days, self.catalog),
            best_streak_seconds=max(state.best_streak_seconds, duration.total_seconds),
            unlocked_badges=tuple(state.unlocked_badges),
            relapse_count=len(state.relapses),
        )

    # ── Reactions ────────────────────────────────────────────────────────

    def tick(self, now: datetime | None = None) -> TickDelta:
        """Run the best-streak and badge reactions, persist if anything changed, notify."""
        with self._lock:
            now = now or self.clock()
            before = self.state
            state = ledger.record_best_streak(before, now)
            state, new_ids = ledger.apply_unlocks(state, now, self.catalog)
            best_changed = state.best_streak_seconds != before.best_streak_seconds
            self.state = state
            if state is not before:
                self._persist(now)
            delta = TickDelta(
                snapshot=self.snapshot(now),
                newly_unlocked=frozenset(new_ids),
                best_streak_changed=best_changed,
            )
        if new_ids:
            logger.info("Unlocked badges: %s", ", ".join(sorted(new_ids)))
        self._publish(delta)
        return delta

    # ── Transitions ──────────────────────────────────────────────────────

    def start(self, now: datetime | None = None) -> bool:
        """Start the streak. Returns False (and changes nothing) if one is already active."""
        with self._lock:
            if self.state.active:
                return False
            now = now or self.clock()
            self.state = ledger.start_streak(self.state, now)
            self._persist(now)
        self.tick(now)
        return True

    def relapse(self, note: str | None = None, now: datetime | None = None) -> ProgressionState:
        """Record a relapse and restart the streak.

        The ending streak is settled first: its length counts toward the best
        streak and any badge it reached is unlocked before the clock resets.
        """
        with self._lock:
            now = now or self.clock()
            state = ledger.record_best_streak(self.state, now)
            state, new_ids = ledger.apply_unlocks(state, now, self.catalog)
            self.state = ledger.record_relapse(state, note, now, self.language)
            self._persist(now)
        if new_ids:
            logger.info("Unlocked badges: %s", ", ".join(sorted(new_ids)))
        self.tick(now)
        return self.state

    def journal(self, content: str, now: datetime | None = None) -> bool:
        """Add a journal entry. Returns False for blank content."""
        with self._lock:
            now = now or self.clock()
            updated = ledger.add_journal_entry(self.state, content, now)
            if updated is self.state:
                return False
            self.state = updated
            self._persist(now)
        return True

    # ── Pub/sub and timer ────────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for every tick. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, delta: TickDelta) -> None:
        for callback in list(self._subscribers):
            callback(delta)

    def run(self, interval: float = TICK_SECONDS) -> None:
        """Start ticking in the background."""
        if self._ticker is None:
            self._ticker = Ticker(self.tick, interval)
        self._ticker.start()

    def close(self) -> None:
        """Cancel the tick timer."""
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

    def __enter__(self) -> StreakSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Persistence ──────────────────────────────────────────────────────

    def _persist(self, now: datetime) -> None:
        duration = elapsed(self.state.start_instant, now)
        self.state = replace(
            self.state,
            points=compute_points(duration.total_seconds, duration.days, self.catalog),
        )
        try:
            self.store.save(self.state)
        except (sqlite3.Error, OSError):
            logger.warning("Could not save progression state", exc_info=True)
