"""Tests for the badge catalog and unlock tracking."""

import pytest

from ascend.badges import (
    BADGES,
    BENEFITS,
    BadgeDefinition,
    benefits_timeline,
    eligible_badges,
    get_badge,
    get_next_badge,
    merge_unlocked,
    unlock_newly,
    validate_catalog,
)

SEED_ONLY = [BadgeDefinition(id="seed", days=1, icon="x")]


class TestCatalog:
    def test_ids_unique(self):
        ids = [b.id for b in BADGES]
        assert len(ids) == len(set(ids))

    def test_thresholds_positive(self):
        assert all(b.days > 0 for b in BADGES)

    def test_known_badges(self):
        assert get_badge("seed").days == 1
        assert get_badge("universe").days == 365

    def test_unknown_badge(self):
        assert get_badge("nope") is None

    def test_names_come_from_locale_table(self):
        assert get_badge("forest").name == "Forest"
        assert get_badge("forest").description == "One month of self-mastery."

    def test_validate_rejects_duplicates(self):
        with pytest.raises(ValueError):
            validate_catalog([BadgeDefinition("a", 1, ""), BadgeDefinition("a", 2, "")])

    def test_validate_rejects_zero_days(self):
        with pytest.raises(ValueError):
            validate_catalog([BadgeDefinition("a", 0, "")])


class TestEligibleBadges:
    def test_none_at_day_zero(self):
        assert eligible_badges(0) == []

    def test_seven_days(self):
        assert [b.id for b in eligible_badges(7)] == ["seed", "sprout", "sapling"]

    def test_all_at_a_year(self):
        assert len(eligible_badges(365)) == len(BADGES)


class TestUnlockNewly:
    def test_empty_at_day_zero(self):
        assert unlock_newly(0, SEED_ONLY, set()) == set()

    def test_seed_at_day_one(self):
        assert unlock_newly(1, SEED_ONLY, set()) == {"seed"}

    def test_seed_returned_exactly_once(self):
        unlocked: set[str] = set()
        first = unlock_newly(1, SEED_ONLY, unlocked)
        unlocked |= first
        assert first == {"seed"}
        for days in (1, 2, 3, 10):
            assert unlock_newly(days, SEED_ONLY, unlocked) == set()

    def test_idempotent_after_merge(self):
        for days in (0, 1, 5, 30, 400):
            start = {"seed"}
            delta = unlock_newly(days, None, start)
            assert unlock_newly(days, None, delta | start) == set()

    def test_only_new_ids(self):
        assert unlock_newly(7, None, ["seed"]) == {"sprout", "sapling"}

    def test_default_catalog(self):
        assert unlock_newly(3, None, []) == {"seed", "sprout"}


class TestMergeUnlocked:
    def test_union_in_threshold_order(self):
        assert merge_unlocked([], {"sapling", "seed", "sprout"}) == ["seed", "sprout", "sapling"]

    def test_never_removes(self):
        merged = merge_unlocked(["forest", "seed"], set())
        assert merged == ["forest", "seed"]

    def test_no_duplicates(self):
        assert merge_unlocked(["seed"], {"seed", "sprout"}) == ["seed", "sprout"]

    def test_keeps_unknown_ids(self):
        assert merge_unlocked(["retired_badge"], {"seed"}) == ["retired_badge", "seed"]


class TestNextBadge:
    def test_from_zero(self):
        assert get_next_badge(0).id == "seed"

    def test_between(self):
        assert get_next_badge(10).id == "tree"

    def test_none_after_all(self):
        assert get_next_badge(365) is None


class TestBenefitsTimeline:
    def test_reached_flags(self):
        timeline = benefits_timeline(7)
        assert [(m.days, reached) for m, reached in timeline] == [
            (1, True), (3, True), (7, True), (14, False), (30, False), (90, False),
        ]

    def test_titles_localized(self):
        assert BENEFITS[0].title() == "Androgen Receptors Reset"
        assert BENEFITS[-1].title("es") == "Reinicio Completo"
