"""Badge Engine - Pure logic for tier resolution and ledger reconciliation.

This engine provides stateless, pure Python functions for:
- Tier table validation (strictly ascending, unique names)
- Current / next tier resolution for a report count
- Earned-badge record validation when rehydrating from storage
- The prune → resolve → award reconciliation step

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
State management (locking, persistence, notification) belongs in BadgeLedger.

Reconciliation semantics:
    PRUNE:   every earned badge whose threshold exceeds the count is dropped
    RESOLVE: the highest threshold with min_count <= count
    AWARD:   appended (earned_at = now) only if that tier is not already held

A tier that is pruned and later re-qualifies is awarded again with a fresh
earned_at. The ledger records continuous qualifying periods, not lifetime
history.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..exceptions import InvalidThresholdConfig
from ..utils.dt_utils import dt_to_iso, dt_to_utc

if TYPE_CHECKING:
    from ..type_defs import EarnedBadgeRecord


# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True, slots=True)
class ThresholdDef:
    """A single tier definition.

    Attributes:
        min_count: Minimum cumulative report count to hold this tier
        tier_name: Unique display name of the tier
        icon: Opaque glyph reference (emoji or mdi: icon)
    """

    min_count: int
    tier_name: str
    icon: str = const.DEFAULT_TIER_ICON


@dataclass(frozen=True, slots=True)
class EarnedBadge:
    """A tier held in the ledger. earned_at is set once, at creation."""

    tier_name: str
    earned_at: datetime

    def to_record(self) -> EarnedBadgeRecord:
        """Return the JSON-serializable storage record."""
        return {
            const.DATA_BADGE_TIER_NAME: self.tier_name,
            const.DATA_BADGE_EARNED_AT: dt_to_iso(self.earned_at),
        }  # type: ignore[return-value]

    @classmethod
    def from_record(cls, record: Any) -> EarnedBadge | None:
        """Build from a storage record, or return None if the shape is wrong."""
        if not isinstance(record, dict):
            return None
        tier_name = record.get(const.DATA_BADGE_TIER_NAME)
        if not isinstance(tier_name, str) or not tier_name:
            return None
        earned_at = dt_to_utc(record.get(const.DATA_BADGE_EARNED_AT))
        if earned_at is None:
            return None
        return cls(tier_name=tier_name, earned_at=earned_at)


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Outcome of one reconciliation pass.

    Attributes:
        changed: Whether the ledger contents differ from before the pass
        newly_unlocked: The threshold awarded in this pass, if any
        badges: Ledger contents after the pass, sorted by threshold
        pruned: Tier names removed by the prune step
    """

    changed: bool
    newly_unlocked: ThresholdDef | None
    badges: tuple[EarnedBadge, ...] = ()
    pruned: tuple[str, ...] = ()


# =============================================================================
# THRESHOLD TABLE
# =============================================================================


class ThresholdTable(Sequence[ThresholdDef]):
    """Immutable tier table, strictly ascending by min_count, unique names.

    The ordering precondition is checked once here; resolution functions rely
    on it and never re-check.
    """

    __slots__ = ("_by_name", "_min_counts", "_thresholds")

    def __init__(self, thresholds: Iterable[ThresholdDef]) -> None:
        """Validate and freeze a tier table.

        Raises:
            InvalidThresholdConfig: empty table, negative count, duplicate
                name or count, or counts not strictly ascending.
        """
        items = tuple(thresholds)
        if not items:
            raise InvalidThresholdConfig("at least one tier is required")

        by_name: dict[str, ThresholdDef] = {}
        previous: ThresholdDef | None = None
        for threshold in items:
            if (
                isinstance(threshold.min_count, bool)
                or not isinstance(threshold.min_count, int)
                or threshold.min_count < 0
            ):
                raise InvalidThresholdConfig(
                    f"tier '{threshold.tier_name}' has invalid minimum "
                    f"count {threshold.min_count!r}"
                )
            if not isinstance(threshold.tier_name, str) or not threshold.tier_name:
                raise InvalidThresholdConfig("tier names must be non-empty strings")
            if threshold.tier_name in by_name:
                raise InvalidThresholdConfig(
                    f"duplicate tier name '{threshold.tier_name}'"
                )
            if previous is not None and threshold.min_count <= previous.min_count:
                raise InvalidThresholdConfig(
                    f"tier '{threshold.tier_name}' ({threshold.min_count}) must "
                    f"exceed '{previous.tier_name}' ({previous.min_count})"
                )
            by_name[threshold.tier_name] = threshold
            previous = threshold

        self._thresholds = items
        self._by_name = by_name
        self._min_counts = tuple(t.min_count for t in items)

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_tuples(cls, rows: Iterable[tuple[int, str, str]]) -> ThresholdTable:
        """Build a table from (min_count, tier_name, icon) tuples."""
        return cls(ThresholdDef(count, name, icon) for count, name, icon in rows)

    @classmethod
    def default(cls) -> ThresholdTable:
        """Return the built-in civic tier table."""
        return cls.from_tuples(const.DEFAULT_BADGE_THRESHOLDS)

    @classmethod
    def from_config(cls, text: str) -> ThresholdTable:
        """Parse the options-flow text form.

        One tier per line: ``min_count|tier_name|icon``. The icon is optional.
        Blank lines and lines starting with ``#`` are ignored.

        Raises:
            InvalidThresholdConfig: on any parse or ordering error.
        """
        if not isinstance(text, str):
            raise InvalidThresholdConfig("threshold definition must be text")

        thresholds: list[ThresholdDef] = []
        for line_no, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            fields = [f.strip() for f in line.split(const.THRESHOLD_FIELD_SEPARATOR)]
            if len(fields) not in (2, 3):
                raise InvalidThresholdConfig(
                    "expected 'min_count|tier_name|icon'", line=line_no
                )
            try:
                min_count = int(fields[0])
            except ValueError as err:
                raise InvalidThresholdConfig(
                    f"'{fields[0]}' is not a whole number", line=line_no
                ) from err
            icon = fields[2] if len(fields) == 3 and fields[2] else None
            thresholds.append(
                ThresholdDef(min_count, fields[1], icon or const.DEFAULT_TIER_ICON)
            )

        return cls(thresholds)

    def to_config(self) -> str:
        """Render the table in the options-flow text form."""
        sep = const.THRESHOLD_FIELD_SEPARATOR
        return "\n".join(
            f"{t.min_count}{sep}{t.tier_name}{sep}{t.icon}" for t in self._thresholds
        )

    # -------------------------------------------------------------------------
    # Sequence protocol and lookups
    # -------------------------------------------------------------------------

    def __getitem__(self, index):  # type: ignore[override]
        return self._thresholds[index]

    def __len__(self) -> int:
        return len(self._thresholds)

    def __iter__(self) -> Iterator[ThresholdDef]:
        return iter(self._thresholds)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ThresholdTable):
            return NotImplemented
        return self._thresholds == other._thresholds

    def __hash__(self) -> int:
        return hash(self._thresholds)

    def __repr__(self) -> str:
        return f"ThresholdTable({list(self._thresholds)!r})"

    @property
    def min_counts(self) -> tuple[int, ...]:
        """Ascending minimum counts, parallel to the table."""
        return self._min_counts

    def get(self, tier_name: str) -> ThresholdDef | None:
        """Return the threshold with this name, or None."""
        return self._by_name.get(tier_name)

    def index_of(self, tier_name: str) -> int | None:
        """Return the position of a tier in the table, or None."""
        threshold = self._by_name.get(tier_name)
        if threshold is None:
            return None
        return self._thresholds.index(threshold)


# =============================================================================
# BADGE ENGINE
# =============================================================================


class BadgeEngine:
    """Pure logic engine for tier resolution and reconciliation.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.
    """

    @staticmethod
    def validate_count(count: int) -> int:
        """Return count if it is a non-negative integer, else raise ValueError."""
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError(f"report count must be a non-negative integer: {count!r}")
        return count

    @staticmethod
    def resolve_tier(count: int, table: ThresholdTable) -> ThresholdDef | None:
        """Return the threshold with the greatest min_count <= count.

        Returns None when count is below the smallest threshold.
        """
        BadgeEngine.validate_count(count)
        index = bisect_right(table.min_counts, count) - 1
        if index < 0:
            return None
        return table[index]

    @staticmethod
    def resolve_next(count: int, table: ThresholdTable) -> ThresholdDef | None:
        """Return the tier after the current one (or the first tier if none held).

        Used only for progress display. Returns None when the top tier is held.
        """
        BadgeEngine.validate_count(count)
        index = bisect_right(table.min_counts, count)
        if index >= len(table):
            return None
        return table[index]

    @staticmethod
    def remaining_to_next(count: int, table: ThresholdTable) -> int | None:
        """Return how many more reports reach the next tier, or None at the top."""
        next_tier = BadgeEngine.resolve_next(count, table)
        if next_tier is None:
            return None
        return max(0, next_tier.min_count - count)

    @staticmethod
    def sort_badges(
        badges: Iterable[EarnedBadge], table: ThresholdTable
    ) -> tuple[EarnedBadge, ...]:
        """Order badges by their threshold's min_count.

        Badges whose tier is not in the table are dropped.
        """
        keyed: list[tuple[int, EarnedBadge]] = []
        for badge in badges:
            threshold = table.get(badge.tier_name)
            if threshold is not None:
                keyed.append((threshold.min_count, badge))
        keyed.sort(key=lambda item: item[0])
        return tuple(badge for _, badge in keyed)

    @staticmethod
    def parse_records(raw: Any, table: ThresholdTable) -> tuple[EarnedBadge, ...]:
        """Validate stored records and rebuild the ledger contents.

        - Not a list, or any structurally malformed record → empty ledger
        - Records for tiers missing from the table are dropped
        - Duplicate tier names keep the first record
        """
        if not isinstance(raw, list):
            return ()

        badges: list[EarnedBadge] = []
        seen: set[str] = set()
        for record in raw:
            badge = EarnedBadge.from_record(record)
            if badge is None:
                return ()
            if badge.tier_name in seen or table.get(badge.tier_name) is None:
                continue
            seen.add(badge.tier_name)
            badges.append(badge)
        return BadgeEngine.sort_badges(badges, table)

    @staticmethod
    def reconcile(
        badges: Sequence[EarnedBadge],
        count: int,
        table: ThresholdTable,
        now: datetime,
    ) -> ReconcileResult:
        """Prune, resolve and award against an authoritative count.

        Pure function - the caller persists result.badges when result.changed.
        Award dedup is membership-based (is the tier already held), so the
        result is idempotent for a repeated count and stable across restarts.
        """
        BadgeEngine.validate_count(count)
        before = tuple(badges)

        kept: list[EarnedBadge] = []
        pruned: list[str] = []
        for badge in before:
            threshold = table.get(badge.tier_name)
            if threshold is None or threshold.min_count > count:
                pruned.append(badge.tier_name)
            else:
                kept.append(badge)

        newly_unlocked: ThresholdDef | None = None
        tier = BadgeEngine.resolve_tier(count, table)
        if tier is not None and all(b.tier_name != tier.tier_name for b in kept):
            kept.append(EarnedBadge(tier_name=tier.tier_name, earned_at=now))
            newly_unlocked = tier

        after = BadgeEngine.sort_badges(kept, table)
        return ReconcileResult(
            changed=after != before,
            newly_unlocked=newly_unlocked,
            badges=after,
            pruned=tuple(pruned),
        )
