# File: __init__.py
"""Initialization file for the Civic Badges integration.

Handles setting up the integration from a config entry: builds the tier
table, the badge store, the ledger, the unlock notifier, the report oracle,
the sync scheduler and the certificate renderer, then starts polling.

Key Features:
- Config entry setup, unload and removal (storage file deleted on removal)
- Unlock announcements on the event bus and as persistent notifications
- Entry reload when options change
"""

from __future__ import annotations

from functools import partial
import os
from typing import Any

from homeassistant.components import persistent_notification
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryError
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from . import const
from .certificate import CertificateRenderer
from .exceptions import InvalidThresholdConfig
from .helpers.flow_helpers import table_from_options
from .managers import BadgeLedger, SyncScheduler, UnlockNotifier
from .oracle import ReportCountOracle
from .services import async_setup_services, async_unload_services
from .store import BadgeStore


@callback
def _announce_unlock(
    hass: HomeAssistant, entry: ConfigEntry, payload: dict[str, Any]
) -> None:
    """Fire the unlock bus event and, if enabled, a persistent notification."""
    hass.bus.async_fire(const.EVENT_BADGE_UNLOCKED, payload)

    if entry.options.get(
        const.CONF_PERSISTENT_NOTIFICATIONS, const.DEFAULT_PERSISTENT_NOTIFICATIONS
    ):
        persistent_notification.async_create(
            hass,
            const.NOTIFICATION_MESSAGE_FMT.format(
                icon=payload[const.ATTR_ICON],
                tier_name=payload[const.ATTR_TIER_NAME],
                min_count=payload[const.ATTR_MIN_COUNT],
            ),
            title=const.NOTIFICATION_TITLE,
            notification_id=f"{const.NOTIFICATION_ID_PREFIX}_{entry.entry_id}",
        )


async def _async_ensure_export_dir(hass: HomeAssistant) -> str:
    """Create the certificate export directory if possible; return its path."""
    export_dir = hass.config.path(const.CERTIFICATE_EXPORT_SUBDIR)
    try:
        await hass.async_add_executor_job(partial(os.makedirs, export_dir, exist_ok=True))
    except OSError as err:
        const.LOGGER.warning(
            "WARNING: Could not create certificate export directory %s: %s",
            export_dir,
            err,
        )
    return export_dir


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for Civic Badges entry: %s", entry.entry_id)

    try:
        table = table_from_options(dict(entry.options))
    except InvalidThresholdConfig as err:
        const.LOGGER.error("ERROR: %s", err)
        raise ConfigEntryError(str(err)) from err

    store = BadgeStore(hass, entry.entry_id)
    await store.async_initialize()

    ledger = BadgeLedger(store, table)
    await ledger.async_load()

    notifier = UnlockNotifier(hass, entry.entry_id, store)
    await notifier.async_setup()
    entry.async_on_unload(
        notifier.listen(
            const.SIGNAL_SUFFIX_BADGE_UNLOCKED, partial(_announce_unlock, hass, entry)
        )
    )

    oracle = ReportCountOracle(
        async_get_clientsession(hass),
        entry.data[const.CONF_API_URL],
        entry.data.get(const.CONF_ACCESS_TOKEN),
        entry.data.get(const.CONF_USER_ID),
    )
    scheduler = SyncScheduler(
        hass,
        entry.entry_id,
        ledger,
        notifier,
        oracle,
        store,
        entry.options.get(const.CONF_POLL_INTERVAL, const.DEFAULT_POLL_INTERVAL),
    )
    await scheduler.async_setup()

    renderer = CertificateRenderer(hass, await _async_ensure_export_dir(hass))

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.RUNTIME_STORE: store,
        const.RUNTIME_TABLE: table,
        const.RUNTIME_LEDGER: ledger,
        const.RUNTIME_NOTIFIER: notifier,
        const.RUNTIME_SCHEDULER: scheduler,
        const.RUNTIME_RENDERER: renderer,
    }

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    await scheduler.async_start()

    const.LOGGER.info("INFO: Civic Badges setup complete for entry: %s", entry.entry_id)
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry so new options take effect."""
    const.LOGGER.debug("DEBUG: Options changed, reloading entry %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Civic Badges entry: %s", entry.entry_id)

    runtime = hass.data.get(const.DOMAIN, {}).get(entry.entry_id)
    if runtime:
        scheduler: SyncScheduler = runtime[const.RUNTIME_SCHEDULER]
        await scheduler.async_stop()

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id, None)
        if not hass.data[const.DOMAIN]:
            await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry: delete its storage file."""
    const.LOGGER.info("INFO: Removing Civic Badges entry: %s", entry.entry_id)
    await BadgeStore(hass, entry.entry_id).async_delete_storage()
    const.LOGGER.info("INFO: Civic Badges entry data cleared: %s", entry.entry_id)
