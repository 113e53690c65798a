"""Badge catalog, unlock tracking and the benefits timeline for ascend."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ascend import i18n


@dataclass(frozen=True)
class BadgeDefinition:
    id: str  # stable across catalog versions; persisted in unlocked sets
    days: int
    icon: str

    @property
    def name(self) -> str:
        return i18n.badge_name(self.id)

    @property
    def description(self) -> str:
        return i18n.badge_description(self.id)


@dataclass(frozen=True)
class BenefitMilestone:
    days: int

    def title(self, language: str | None = None) -> str:
        return i18n.benefit_title(self.days, language)

    def description(self, language: str | None = None) -> str:
        return i18n.benefit_description(self.days, language)


BADGES: list[BadgeDefinition] = [
    BadgeDefinition(id="seed", days=1, icon="\U0001f331"),
    BadgeDefinition(id="sprout", days=3, icon="\U0001f33f"),
    BadgeDefinition(id="sapling", days=7, icon="\U0001f333"),
    BadgeDefinition(id="tree", days=14, icon="\U0001f332"),
    BadgeDefinition(id="forest", days=30, icon="\U0001f343"),
    BadgeDefinition(id="mountain", days=60, icon="⛰️"),
    BadgeDefinition(id="sky", days=90, icon="☁️"),
    BadgeDefinition(id="space", days=180, icon="\U0001f680"),
    BadgeDefinition(id="universe", days=365, icon="\U0001f30c"),
]

BENEFITS: list[BenefitMilestone] = [
    BenefitMilestone(days=1),
    BenefitMilestone(days=3),
    BenefitMilestone(days=7),
    BenefitMilestone(days=14),
    BenefitMilestone(days=30),
    BenefitMilestone(days=90),
]


def validate_catalog(catalog: list[BadgeDefinition]) -> None:
    """Raise ValueError on duplicate ids or non-positive thresholds."""
    seen: set[str] = set()
    for badge in catalog:
        if badge.id in seen:
            raise ValueError(f"duplicate badge id: {badge.id}")
        if badge.days <= 0:
            raise ValueError(f"badge {badge.id} must have days > 0")
        seen.add(badge.id)


def get_badge(badge_id: str, catalog: list[BadgeDefinition] | None = None) -> BadgeDefinition | None:
    """Look up a badge definition by id."""
    for badge in BADGES if catalog is None else catalog:
        if badge.id == badge_id:
            return badge
    return None


def eligible_badges(days: int, catalog: list[BadgeDefinition] | None = None) -> list[BadgeDefinition]:
    """Badges whose day threshold is met by the current streak."""
    return [b for b in (BADGES if catalog is None else catalog) if days >= b.days]


def unlock_newly(
    days: int,
    catalog: list[BadgeDefinition] | None,
    already_unlocked: Iterable[str],
) -> set[str]:
    """Return ids that are eligible at `days` but not yet unlocked.

    Idempotent: once merged, the same inputs give an empty set.
    """
    unlocked = set(already_unlocked)
    return {b.id for b in eligible_badges(days, catalog) if b.id not in unlocked}


def merge_unlocked(already_unlocked: list[str], new_ids: Iterable[str]) -> list[str]:
    """Set union preserving unlock order. Never removes an id."""
    merged = list(already_unlocked)
    present = set(merged)
    for badge_id in sorted(new_ids, key=_catalog_order):
        if badge_id not in present:
            merged.append(badge_id)
            present.add(badge_id)
    return merged


def _catalog_order(badge_id: str) -> tuple[int, str]:
    badge = get_badge(badge_id)
    return (badge.days if badge else 0, badge_id)


def get_next_badge(days: int, catalog: list[BadgeDefinition] | None = None) -> BadgeDefinition | None:
    """Return the closest badge not yet reached by the current streak."""
    pending = [b for b in (BADGES if catalog is None else catalog) if b.days > days]
    if not pending:
        return None
    return min(pending, key=lambda b: b.days)


def benefits_timeline(days: int, milestones: list[BenefitMilestone] | None = None) -> list[tuple[BenefitMilestone, bool]]:
    """Pair every benefit milestone with whether the current streak has reached it."""
    return [(m, days >= m.days) for m in (BENEFITS if milestones is None else milestones)]


validate_catalog(BADGES)
