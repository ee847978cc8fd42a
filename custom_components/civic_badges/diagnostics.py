"""Diagnostics support for Civic Badges integration.

Returns the raw badge storage for the entry together with the active tier
table and sync state. The access token is redacted.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .utils.dt_utils import dt_to_iso

TO_REDACT = {const.CONF_ACCESS_TOKEN}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    data = hass.data[const.DOMAIN][entry.entry_id]
    store = data[const.RUNTIME_STORE]
    table = data[const.RUNTIME_TABLE]
    scheduler = data[const.RUNTIME_SCHEDULER]
    last_synced = scheduler.last_synced_at

    return {
        "entry": async_redact_data(dict(entry.data), TO_REDACT),
        "options": dict(entry.options),
        "thresholds": table.to_config(),
        "storage": store.data,
        "sync": {
            "running": scheduler.is_running,
            "poll_interval": scheduler.poll_interval.total_seconds(),
            "last_sync_success": scheduler.last_sync_success,
            "last_error": scheduler.last_error,
            "last_synced_at": dt_to_iso(last_synced) if last_synced else None,
        },
    }
