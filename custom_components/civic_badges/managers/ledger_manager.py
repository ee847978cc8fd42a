"""Ledger Manager - The persisted record of earned civic badges.

ARCHITECTURE:
- BadgeLedger = STATEFUL owner of the earned-badge list (cache + persistence)
- BadgeEngine = Pure prune/resolve/award logic (STATELESS)

The persistence port is the single source of durable truth; the in-memory
badge tuple is a cache of it, rehydrated by async_load() and flushed on every
mutation. The ledger is mutated only through async_reconcile() and cleared
only through async_reset().

Every reconciliation runs under one asyncio.Lock, so prune/resolve/award/
persist steps of two passes never interleave, whichever caller started them.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from .. import const
from ..engines.badge_engine import BadgeEngine, EarnedBadge, ReconcileResult
from ..utils.dt_utils import dt_now_utc

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from ..engines.badge_engine import ThresholdDef, ThresholdTable
    from ..store import BaseBadgeStore


class BadgeLedger:
    """Ordered set of earned badges for one identity.

    Responsibilities:
    - Rehydrate and validate stored records (malformed data → empty ledger)
    - Serialize reconciliation passes
    - Persist the ledger whenever a pass changes it

    NOT responsible for:
    - Unlock notifications (UnlockNotifier)
    - Fetching counts or scheduling (SyncScheduler)
    """

    def __init__(
        self,
        store: BaseBadgeStore,
        table: ThresholdTable,
        *,
        now: Callable[[], datetime] = dt_now_utc,
    ) -> None:
        """Initialize the ledger.

        Args:
            store: Persistence port holding the earned_badges value
            table: Validated tier table
            now: Clock used for earned_at of newly awarded badges
        """
        self._store = store
        self._table = table
        self._now = now
        self._badges: tuple[EarnedBadge, ...] = ()
        self._lock = asyncio.Lock()
        self._loaded = False

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def table(self) -> ThresholdTable:
        """Return the tier table this ledger resolves against."""
        return self._table

    @property
    def badges(self) -> tuple[EarnedBadge, ...]:
        """Return earned badges sorted by threshold."""
        return self._badges

    @property
    def top_badge(self) -> EarnedBadge | None:
        """Return the highest earned badge, or None."""
        return self._badges[-1] if self._badges else None

    @property
    def top_tier(self) -> ThresholdDef | None:
        """Return the threshold of the highest earned badge, or None."""
        top = self.top_badge
        return self._table.get(top.tier_name) if top else None

    def get(self, tier_name: str) -> EarnedBadge | None:
        """Return the earned badge for a tier, or None."""
        for badge in self._badges:
            if badge.tier_name == tier_name:
                return badge
        return None

    def is_earned(self, tier_name: str) -> bool:
        """Return True if the tier is currently held."""
        return self.get(tier_name) is not None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def async_load(self) -> None:
        """Rehydrate the cache from the persistence port."""
        raw = self._store.get(const.DATA_EARNED_BADGES)
        badges = BadgeEngine.parse_records(raw, self._table)

        malformed = not isinstance(raw, list) or any(
            EarnedBadge.from_record(record) is None for record in raw
        )
        if raw and malformed:
            const.LOGGER.warning(
                "WARNING: Stored earned badges are malformed; "
                "starting with an empty ledger"
            )
        elif isinstance(raw, list) and len(badges) != len(raw):
            const.LOGGER.info(
                "INFO: Dropped %s stored badge record(s) that are duplicates "
                "or not in the tier table",
                len(raw) - len(badges),
            )

        self._badges = badges
        self._loaded = True
        const.LOGGER.debug(
            "DEBUG: Ledger loaded with %s badge(s): %s",
            len(badges),
            [b.tier_name for b in badges],
        )

    async def async_reconcile(self, count: int) -> ReconcileResult:
        """Prune, resolve, award and persist against an authoritative count.

        Args:
            count: Non-negative report count from the oracle

        Returns:
            ReconcileResult with changed flag and newly_unlocked threshold

        Raises:
            ValueError: if count is not a non-negative integer
        """
        BadgeEngine.validate_count(count)
        async with self._lock:
            if not self._loaded:
                await self.async_load()

            result = BadgeEngine.reconcile(self._badges, count, self._table, self._now())

            if result.pruned:
                const.LOGGER.info(
                    "INFO: Count %s no longer qualifies for %s; removed from ledger",
                    count,
                    list(result.pruned),
                )
            if result.changed:
                self._badges = result.badges
                await self._store.async_set(
                    const.DATA_EARNED_BADGES,
                    [badge.to_record() for badge in result.badges],
                )
            if result.newly_unlocked is not None:
                const.LOGGER.info(
                    "INFO: Awarded tier '%s' at count %s",
                    result.newly_unlocked.tier_name,
                    count,
                )
            else:
                const.LOGGER.debug(
                    "DEBUG: Reconciled count %s, ledger changed=%s",
                    count,
                    result.changed,
                )
            return result

    async def async_reset(self) -> None:
        """Clear every persisted value for this identity (ledger, pointer, count)."""
        async with self._lock:
            await self._store.async_reset_all()
            self._badges = ()
            self._loaded = True
