"""Base entity classes for Civic Badges integration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity import Entity

from . import const
from .helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry

    from .managers import BadgeLedger, SyncScheduler


class CivicBadgesEntity(Entity):
    """Base entity for one reporting identity.

    Entities do not poll; they are written whenever the sync scheduler emits
    SIGNAL_SUFFIX_SYNC_UPDATED (applied or failed poll, optimistic bump, reset).
    """

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(
        self,
        entry: ConfigEntry,
        ledger: BadgeLedger,
        scheduler: SyncScheduler,
        unique_id_suffix: str,
    ) -> None:
        """Initialize the entity.

        Args:
            entry: Config entry of the identity
            ledger: Badge ledger read for state
            scheduler: Sync scheduler read for state
            unique_id_suffix: Per-entity suffix appended to the entry id
        """
        self._entry = entry
        self._ledger = ledger
        self._scheduler = scheduler
        self._attr_unique_id = f"{entry.entry_id}{unique_id_suffix}"
        self._attr_device_info = DeviceInfo(
            identifiers={(const.DOMAIN, entry.entry_id)},
            name=entry.title,
            manufacturer=const.CIVIC_BADGES_TITLE,
            entry_type=DeviceEntryType.SERVICE,
        )

    async def async_added_to_hass(self) -> None:
        """Subscribe to scheduler state changes."""
        await super().async_added_to_hass()
        signal = get_event_signal(
            self._entry.entry_id, const.SIGNAL_SUFFIX_SYNC_UPDATED
        )
        self.async_on_remove(
            async_dispatcher_connect(self.hass, signal, self._on_sync_updated)
        )

    @callback
    def _on_sync_updated(self, _payload: dict[str, Any] | None = None) -> None:
        """Write state after the scheduler changed what the entity shows."""
        self.async_write_ha_state()
