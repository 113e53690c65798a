"""Rank table and resolution. Pure functions, no side effects."""

from __future__ import annotations

from dataclasses import dataclass

from ascend import i18n


@dataclass(frozen=True)
class RankDefinition:
    min_days: int
    id: str
    color: str  # display hint, a Rich color name

    @property
    def name(self) -> str:
        return i18n.rank_name(self.id)

    def display_name(self, language: str | None = None) -> str:
        return i18n.rank_name(self.id, language)


RANKS: list[RankDefinition] = [
    RankDefinition(min_days=0, id="recruit", color="grey62"),
    RankDefinition(min_days=4, id="novice", color="sky_blue2"),
    RankDefinition(min_days=8, id="apprentice", color="slate_blue1"),
    RankDefinition(min_days=15, id="warrior", color="spring_green3"),
    RankDefinition(min_days=31, id="knight", color="dark_cyan"),
    RankDefinition(min_days=61, id="master", color="medium_purple"),
    RankDefinition(min_days=91, id="grandmaster", color="gold1"),
    RankDefinition(min_days=181, id="legend", color="dark_orange"),
    RankDefinition(min_days=366, id="immortal", color="red1"),
]


def validate_rank_table(rank_table: list[RankDefinition]) -> None:
    """Raise ValueError unless the table is non-empty, has a 0-day floor and unique ids."""
    if not rank_table:
        raise ValueError("rank table is empty")
    if not any(r.min_days == 0 for r in rank_table):
        raise ValueError("rank table needs a min_days=0 entry")
    ids = [r.id for r in rank_table]
    if len(ids) != len(set(ids)):
        raise ValueError("rank ids must be unique")


def resolve_rank(days: int, rank_table: list[RankDefinition] | None = None) -> RankDefinition | None:
    """Return the rank with the highest min_days not exceeding days.

    Total for any table with a min_days=0 entry. An empty table is a
    programming error: asserts, or returns None when assertions are off.
    """
    table = RANKS if rank_table is None else rank_table
    assert table, "rank table must not be empty"
    best: RankDefinition | None = None
    for rank in table:
        if rank.min_days <= days and (best is None or rank.min_days > best.min_days):
            best = rank
    return best


def next_rank(days: int, rank_table: list[RankDefinition] | None = None) -> RankDefinition | None:
    """Return the first rank above the current one, or None at the top."""
    table = RANKS if rank_table is None else rank_table
    above = [r for r in table if r.min_days > days]
    if not above:
        return None
    return min(above, key=lambda r: r.min_days)


def rank_progress(days: int, rank_table: list[RankDefinition] | None = None) -> tuple[int, int]:
    """Return (days_into_current_rank, days_spanned_by_current_rank).

    At the top rank, returns (days_past_last_threshold, 0).
    """
    current = resolve_rank(days, rank_table)
    floor = current.min_days if current else 0
    upcoming = next_rank(days, rank_table)
    if upcoming is None:
        return (max(0, days - floor), 0)
    return (max(0, days - floor), upcoming.min_days - floor)


validate_rank_table(RANKS)
