"""Points calculation for ascend.

Points are derived, not accumulated: the same elapsed time always yields the
same score. All calculations use integers.
"""

from __future__ import annotations

from ascend.badges import BADGES, BadgeDefinition

POINTS_PER_HOUR = 1
MILESTONE_MULTIPLIER = 10


def hourly_points(elapsed_seconds: int) -> int:
    """One point per whole hour of the current streak."""
    return max(0, elapsed_seconds) // 3600 * POINTS_PER_HOUR


def milestone_points(days: int, catalog: list[BadgeDefinition] | None = None) -> int:
    """Bonus of badge.days * 10 for every badge threshold met by `days`."""
    return sum(
        badge.days * MILESTONE_MULTIPLIER
        for badge in (BADGES if catalog is None else catalog)
        if days >= badge.days
    )


def compute_points(elapsed_seconds: int, days: int, catalog: list[BadgeDefinition] | None = None) -> int:
    """Total score for the current streak."""
    return hourly_points(elapsed_seconds) + milestone_points(days, catalog)


def points_breakdown(elapsed_seconds: int, days: int, catalog: list[BadgeDefinition] | None = None) -> dict[str, int]:
    hourly = hourly_points(elapsed_seconds)
    milestones = milestone_points(days, catalog)
    return {"hourly": hourly, "milestones": milestones, "total": hourly + milestones}
