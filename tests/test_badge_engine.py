"""Tests for BadgeEngine and ThresholdTable - pure logic, no HA fixtures needed.

These tests validate tier table validation, tier resolution and the
prune/resolve/award reconciliation step without any Home Assistant setup.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from custom_components.civic_badges import const
from custom_components.civic_badges.engines.badge_engine import (
    BadgeEngine,
    EarnedBadge,
    ThresholdDef,
    ThresholdTable,
)
from custom_components.civic_badges.exceptions import InvalidThresholdConfig

T0 = datetime(2025, 4, 7, 12, 0, tzinfo=UTC)


def _names(badges) -> list[str]:
    return [b.tier_name for b in badges]


# =============================================================================
# TEST: THRESHOLD TABLE
# =============================================================================


class TestThresholdTable:
    """Tier table construction and validation."""

    def test_default_table(self) -> None:
        """The built-in table has the six civic tiers in ascending order."""
        table = ThresholdTable.default()
        assert [t.tier_name for t in table] == [
            "Bronze",
            "Silver",
            "Diamond",
            "Titanium",
            "Vibranium",
            "Ultra Civic",
        ]
        assert table.min_counts == (10, 20, 50, 100, 300, 700)
        assert table.get("Diamond") == ThresholdDef(50, "Diamond", "💎")

    def test_empty_table_rejected(self) -> None:
        with pytest.raises(InvalidThresholdConfig):
            ThresholdTable([])

    def test_non_ascending_rejected(self) -> None:
        with pytest.raises(InvalidThresholdConfig, match="must exceed"):
            ThresholdTable.from_tuples([(20, "Silver", "x"), (10, "Bronze", "y")])

    def test_equal_counts_rejected(self) -> None:
        with pytest.raises(InvalidThresholdConfig):
            ThresholdTable.from_tuples([(10, "Bronze", "x"), (10, "Copper", "y")])

    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(InvalidThresholdConfig, match="duplicate"):
            ThresholdTable.from_tuples([(10, "Bronze", "x"), (20, "Bronze", "y")])

    @pytest.mark.parametrize("count", [-1, True, 2.5])
    def test_invalid_counts_rejected(self, count) -> None:
        with pytest.raises(InvalidThresholdConfig):
            ThresholdTable([ThresholdDef(count, "Odd")])

    def test_zero_threshold_allowed(self) -> None:
        """A tier held from the very first report count is valid."""
        table = ThresholdTable.from_tuples([(0, "Starter", "🌱"), (5, "Helper", "🤝")])
        assert BadgeEngine.resolve_tier(0, table).tier_name == "Starter"

    def test_lookup_helpers(self, threshold_table: ThresholdTable) -> None:
        assert len(threshold_table) == 3
        assert threshold_table.index_of("Silver") == 1
        assert threshold_table.index_of("Gold") is None
        assert threshold_table.get("Gold") is None
        assert threshold_table[-1].tier_name == "Diamond"


class TestThresholdConfigText:
    """Options-flow text form of the tier table."""

    def test_parse_with_optional_icon_and_comments(self) -> None:
        table = ThresholdTable.from_config(
            "# civic tiers\n\n5|Starter\n15 | Helper | mdi:hand-heart\n"
        )
        assert list(table) == [
            ThresholdDef(5, "Starter", const.DEFAULT_TIER_ICON),
            ThresholdDef(15, "Helper", "mdi:hand-heart"),
        ]

    def test_default_table_text_parses_back(self) -> None:
        table = ThresholdTable.default()
        assert ThresholdTable.from_config(table.to_config()) == table

    def test_bad_number_reports_line(self) -> None:
        with pytest.raises(InvalidThresholdConfig) as err:
            ThresholdTable.from_config("10|Bronze\nten|Silver")
        assert err.value.line == 2

    def test_wrong_field_count_rejected(self) -> None:
        with pytest.raises(InvalidThresholdConfig) as err:
            ThresholdTable.from_config("10|Bronze|x|extra")
        assert err.value.line == 1

    def test_only_comments_rejected(self) -> None:
        with pytest.raises(InvalidThresholdConfig):
            ThresholdTable.from_config("# nothing here")


# =============================================================================
# TEST: TIER RESOLUTION
# =============================================================================


class TestResolveTier:
    """Current and next tier for a count."""

    @pytest.mark.parametrize(
        ("count", "expected"),
        [
            (0, None),
            (9, None),
            (10, "Bronze"),
            (19, "Bronze"),
            (20, "Silver"),
            (49, "Silver"),
            (50, "Diamond"),
            (10_000, "Diamond"),
        ],
    )
    def test_boundaries(
        self, threshold_table: ThresholdTable, count: int, expected: str | None
    ) -> None:
        tier = BadgeEngine.resolve_tier(count, threshold_table)
        assert (tier.tier_name if tier else None) == expected

    def test_selects_greatest_qualifying_threshold(self) -> None:
        """For every count, the result is the qualifying tier with the largest minimum."""
        table = ThresholdTable.default()
        for count in range(0, 800):
            qualifying = [t for t in table if t.min_count <= count]
            expected = max(qualifying, key=lambda t: t.min_count) if qualifying else None
            assert BadgeEngine.resolve_tier(count, table) == expected

    def test_negative_count_rejected(self, threshold_table: ThresholdTable) -> None:
        with pytest.raises(ValueError):
            BadgeEngine.resolve_tier(-1, threshold_table)

    @pytest.mark.parametrize(
        ("count", "next_name", "remaining"),
        [
            (0, "Bronze", 10),
            (12, "Silver", 8),
            (20, "Diamond", 30),
            (50, None, None),
        ],
    )
    def test_next_tier_and_remaining(
        self,
        threshold_table: ThresholdTable,
        count: int,
        next_name: str | None,
        remaining: int | None,
    ) -> None:
        next_tier = BadgeEngine.resolve_next(count, threshold_table)
        assert (next_tier.tier_name if next_tier else None) == next_name
        assert BadgeEngine.remaining_to_next(count, threshold_table) == remaining


# =============================================================================
# TEST: RECONCILIATION
# =============================================================================


class TestReconcile:
    """Prune, resolve and award."""

    def test_rise_fall_and_reearn_sequence(
        self, threshold_table: ThresholdTable
    ) -> None:
        """0 → 12 → 22 → 15 → 22 walks through award, prune and re-award."""
        t1, t2, t3 = T0, T0 + timedelta(hours=1), T0 + timedelta(hours=3)

        result = BadgeEngine.reconcile((), 0, threshold_table, T0)
        assert result.badges == ()
        assert result.newly_unlocked is None
        assert not result.changed

        result = BadgeEngine.reconcile(result.badges, 12, threshold_table, t1)
        assert result.badges == (EarnedBadge("Bronze", t1),)
        assert result.newly_unlocked.tier_name == "Bronze"
        assert result.changed

        result = BadgeEngine.reconcile(result.badges, 22, threshold_table, t2)
        assert result.badges == (EarnedBadge("Bronze", t1), EarnedBadge("Silver", t2))
        assert result.newly_unlocked.tier_name == "Silver"

        result = BadgeEngine.reconcile(result.badges, 15, threshold_table, t2)
        assert result.badges == (EarnedBadge("Bronze", t1),)
        assert result.newly_unlocked is None
        assert result.pruned == ("Silver",)
        assert result.changed

        result = BadgeEngine.reconcile(result.badges, 22, threshold_table, t3)
        assert result.badges == (EarnedBadge("Bronze", t1), EarnedBadge("Silver", t3))
        assert result.newly_unlocked.tier_name == "Silver"

    def test_repeated_count_is_idempotent(
        self, threshold_table: ThresholdTable
    ) -> None:
        first = BadgeEngine.reconcile((), 25, threshold_table, T0)
        second = BadgeEngine.reconcile(
            first.badges, 25, threshold_table, T0 + timedelta(days=1)
        )
        assert second.badges == first.badges
        assert second.newly_unlocked is None
        assert not second.changed

    def test_jump_awards_only_current_tier(
        self, threshold_table: ThresholdTable
    ) -> None:
        """Skipping tiers awards the resolved tier, not the ones passed over."""
        result = BadgeEngine.reconcile((), 60, threshold_table, T0)
        assert _names(result.badges) == ["Diamond"]

    def test_drop_prunes_everything_above_count(
        self, threshold_table: ThresholdTable
    ) -> None:
        held = (
            EarnedBadge("Bronze", T0),
            EarnedBadge("Silver", T0),
            EarnedBadge("Diamond", T0),
        )
        result = BadgeEngine.reconcile(held, 5, threshold_table, T0)
        assert result.badges == ()
        assert set(result.pruned) == {"Bronze", "Silver", "Diamond"}

    def test_unknown_tiers_are_pruned(self, threshold_table: ThresholdTable) -> None:
        held = (EarnedBadge("Bronze", T0), EarnedBadge("Legacy Gold", T0))
        result = BadgeEngine.reconcile(held, 12, threshold_table, T0)
        assert _names(result.badges) == ["Bronze"]
        assert result.pruned == ("Legacy Gold",)
        assert result.newly_unlocked is None

    def test_result_sorted_by_threshold(self, threshold_table: ThresholdTable) -> None:
        held = (EarnedBadge("Silver", T0), EarnedBadge("Bronze", T0))
        result = BadgeEngine.reconcile(held, 25, threshold_table, T0)
        assert _names(result.badges) == ["Bronze", "Silver"]


class TestParseRecords:
    """Rehydration of stored records."""

    def test_valid_records(self, threshold_table: ThresholdTable) -> None:
        raw = [
            {"tier_name": "Silver", "earned_at": "2025-04-07T13:00:00+00:00"},
            {"tier_name": "Bronze", "earned_at": "2025-04-07T12:00:00+00:00"},
        ]
        badges = BadgeEngine.parse_records(raw, threshold_table)
        assert badges == (
            EarnedBadge("Bronze", T0),
            EarnedBadge("Silver", T0 + timedelta(hours=1)),
        )

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "Bronze",
            {"tier_name": "Bronze"},
            [{"tier_name": "Bronze", "earned_at": "yesterday"}],
            [{"tier_name": "Bronze", "earned_at": "2025-04-07T12:00:00+00:00"}, 42],
            [{"earned_at": "2025-04-07T12:00:00+00:00"}],
        ],
    )
    def test_malformed_data_gives_empty_ledger(
        self, threshold_table: ThresholdTable, raw
    ) -> None:
        assert BadgeEngine.parse_records(raw, threshold_table) == ()

    def test_unknown_and_duplicate_records_dropped(
        self, threshold_table: ThresholdTable
    ) -> None:
        raw = [
            {"tier_name": "Bronze", "earned_at": "2025-04-07T12:00:00+00:00"},
            {"tier_name": "Gold", "earned_at": "2025-04-07T12:00:00+00:00"},
            {"tier_name": "Bronze", "earned_at": "2025-05-01T00:00:00+00:00"},
        ]
        assert BadgeEngine.parse_records(raw, threshold_table) == (
            EarnedBadge("Bronze", T0),
        )

    def test_record_round_trip_keeps_timestamp(self) -> None:
        badge = EarnedBadge("Bronze", T0)
        assert badge.to_record() == {
            "tier_name": "Bronze",
            "earned_at": "2025-04-07T12:00:00+00:00",
        }
        assert EarnedBadge.from_record(badge.to_record()) == badge
