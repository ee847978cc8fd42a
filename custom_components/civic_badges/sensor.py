# File: sensor.py
"""Sensors for the Civic Badges integration.

1. CurrentBadgeSensor - highest earned tier (or "none"), with earned badges,
   next tier and remaining reports as attributes
2. ReportCountSensor - report count shown to the user (optimistic-aware)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .engines.badge_engine import BadgeEngine
from .entity import CivicBadgesEntity
from .utils.dt_utils import dt_to_iso

if TYPE_CHECKING:
    from .managers import BadgeLedger, SyncScheduler


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up sensors for a Civic Badges entry."""
    data = hass.data[const.DOMAIN][entry.entry_id]
    ledger = data[const.RUNTIME_LEDGER]
    scheduler = data[const.RUNTIME_SCHEDULER]

    async_add_entities(
        [
            CurrentBadgeSensor(entry, ledger, scheduler),
            ReportCountSensor(entry, ledger, scheduler),
        ]
    )


class CurrentBadgeSensor(CivicBadgesEntity, SensorEntity):
    """Highest earned civic badge."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_CURRENT_BADGE

    def __init__(
        self, entry: ConfigEntry, ledger: BadgeLedger, scheduler: SyncScheduler
    ) -> None:
        """Initialize the sensor."""
        super().__init__(
            entry, ledger, scheduler, const.SENSOR_UID_SUFFIX_CURRENT_BADGE
        )

    @property
    def native_value(self) -> str:
        """Return the top earned tier name, or "none"."""
        top = self._ledger.top_badge
        return top.tier_name if top else const.SENTINEL_NONE_TEXT

    @property
    def icon(self) -> str:
        """Return the tier icon when it is an mdi icon."""
        tier = self._ledger.top_tier
        if tier is None:
            return const.DEFAULT_NO_BADGE_ICON
        if tier.icon.startswith("mdi:"):
            return tier.icon
        return const.DEFAULT_TIER_ICON

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return earned badges, progress and sync details."""
        table = self._ledger.table
        count = self._scheduler.display_count or 0
        next_tier = BadgeEngine.resolve_next(count, table)
        last_synced = self._scheduler.last_synced_at

        return {
            const.ATTR_EARNED_BADGES: [
                {
                    const.ATTR_TIER_NAME: badge.tier_name,
                    const.ATTR_EARNED_AT: dt_to_iso(badge.earned_at),
                }
                for badge in self._ledger.badges
            ],
            const.ATTR_NEXT_TIER: next_tier.tier_name if next_tier else None,
            const.ATTR_REMAINING_TO_NEXT: BadgeEngine.remaining_to_next(count, table),
            const.ATTR_DISPLAY_COUNT: self._scheduler.display_count,
            const.ATTR_LAST_SYNCED_AT: dt_to_iso(last_synced) if last_synced else None,
            const.ATTR_LAST_SYNC_SUCCESS: self._scheduler.last_sync_success,
        }


class ReportCountSensor(CivicBadgesEntity, SensorEntity):
    """Number of civic reports filed; may run ahead of the server until sync."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_REPORT_COUNT
    _attr_icon = const.DEFAULT_REPORTS_ICON
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(
        self, entry: ConfigEntry, ledger: BadgeLedger, scheduler: SyncScheduler
    ) -> None:
        """Initialize the sensor."""
        super().__init__(
            entry, ledger, scheduler, const.SENSOR_UID_SUFFIX_REPORT_COUNT
        )

    @property
    def native_value(self) -> int | None:
        """Return the displayed report count."""
        return self._scheduler.display_count
