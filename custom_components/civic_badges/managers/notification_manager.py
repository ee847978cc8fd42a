# File: notification_manager.py
"""Unlock Notifier for Civic Badges integration.

Turns reconciliation results into at-most-once unlock events for the
presentation layer (bus event, persistent notification, toast, ...). Unlocks
are emitted on the SIGNAL_SUFFIX_BADGE_UNLOCKED dispatcher signal.

Separation of concerns:
- BadgeLedger decides what is EARNED (membership-based award dedup)
- UnlockNotifier decides what is ANNOUNCED (last-unlocked pointer)

The two mechanisms are independent. A mismatch between them (for
example after a manual storage edit) can at worst skip or repeat a
notification; it can never make the ledger award a tier again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_now_utc, dt_to_iso
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime

    from homeassistant.core import HomeAssistant

    from ..engines.badge_engine import ReconcileResult
    from ..store import BaseBadgeStore
    from ..type_defs import BadgeUnlockedEvent


@dataclass(frozen=True, slots=True)
class UnlockEvent:
    """A genuinely new top tier, to be presented once."""

    tier_name: str
    min_count: int
    icon: str
    earned_at: datetime

    def as_event_data(self, entry_id: str) -> BadgeUnlockedEvent:
        """Return the bus event payload for this unlock."""
        return {
            const.ATTR_ENTRY_ID: entry_id,
            const.ATTR_TIER_NAME: self.tier_name,
            const.ATTR_MIN_COUNT: self.min_count,
            const.ATTR_ICON: self.icon,
            const.ATTR_EARNED_AT: dt_to_iso(self.earned_at),
        }  # type: ignore[return-value]


class UnlockNotifier(BaseManager):
    """Emits an unlock event at most once per newly unlocked tier.

    Persisted state: the last_unlocked_tier value of the badge store.
    """

    def __init__(
        self, hass: HomeAssistant, entry_id: str, store: BaseBadgeStore
    ) -> None:
        """Initialize the notifier.

        Args:
            hass: Home Assistant instance
            entry_id: Config entry whose unlocks are announced
            store: Persistence port holding the last_unlocked_tier value
        """
        super().__init__(hass, entry_id)
        self._store = store
        self._last_tier: str | None = None

    @property
    def last_unlocked_tier(self) -> str | None:
        """Return the tier name of the last dispatched unlock."""
        return self._last_tier

    async def async_setup(self) -> None:
        """Load the last-unlocked pointer from storage."""
        stored = self._store.get(const.DATA_LAST_UNLOCKED_TIER)
        self._last_tier = stored if isinstance(stored, str) and stored else None
        const.LOGGER.debug("DEBUG: Last unlocked tier: %s", self._last_tier)

    async def async_process(self, result: ReconcileResult) -> UnlockEvent | None:
        """Dispatch an unlock event for a reconcile result, at most once per tier.

        The pointer is updated before any receiver runs or any I/O is awaited,
        so an overlapping or re-entrant call for the same tier sees it and
        does not fire again.

        Returns:
            The dispatched UnlockEvent, or None if nothing was announced.
        """
        tier = result.newly_unlocked
        if tier is None:
            return None

        if tier.tier_name == self._last_tier:
            const.LOGGER.debug(
                "DEBUG: Unlock for '%s' already announced; skipping notification",
                tier.tier_name,
            )
            return None

        self._last_tier = tier.tier_name

        earned_at = next(
            (b.earned_at for b in result.badges if b.tier_name == tier.tier_name),
            None,
        ) or dt_now_utc()
        event = UnlockEvent(
            tier_name=tier.tier_name,
            min_count=tier.min_count,
            icon=tier.icon,
            earned_at=earned_at,
        )
        const.LOGGER.info("INFO: Announcing unlock of tier '%s'", tier.tier_name)

        await self._store.async_set(const.DATA_LAST_UNLOCKED_TIER, tier.tier_name)
        self.emit(
            const.SIGNAL_SUFFIX_BADGE_UNLOCKED, **event.as_event_data(self.entry_id)
        )
        return event
