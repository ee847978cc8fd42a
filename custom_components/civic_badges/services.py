# File: services.py
"""Defines custom services for the Civic Badges integration.

These services allow direct actions through scripts or automations:
- refresh: reconcile now against the report API
- record_submission: optimistic bump of the displayed report count
- export_certificate: write a PDF certificate for an earned badge
- reset: clear earned badges, unlock pointer and display count

Every service accepts an optional config_entry_id; without it the first
loaded entry is used.
"""

from __future__ import annotations

from typing import Any

from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv
import voluptuous as vol

from . import const
from .engines.certificate_engine import CertificateEngine
from .managers import SyncOutcome

# --- Service Schemas ---
REFRESH_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_CONFIG_ENTRY_ID): cv.string,
    }
)

RECORD_SUBMISSION_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_CONFIG_ENTRY_ID): cv.string,
        vol.Optional(const.FIELD_COUNT, default=1): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)

EXPORT_CERTIFICATE_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_CONFIG_ENTRY_ID): cv.string,
        vol.Optional(const.FIELD_TIER_NAME): cv.string,
        vol.Optional(const.FIELD_RECIPIENT_NAME): cv.string,
    }
)

RESET_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_CONFIG_ENTRY_ID): cv.string,
    }
)

SERVICES = (
    const.SERVICE_REFRESH,
    const.SERVICE_RECORD_SUBMISSION,
    const.SERVICE_EXPORT_CERTIFICATE,
    const.SERVICE_RESET,
)


def get_first_entry_id(hass: HomeAssistant) -> str | None:
    """Retrieve the first loaded Civic Badges config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)


def _resolve_entry(hass: HomeAssistant, call: ServiceCall) -> tuple[str, dict[str, Any]]:
    """Return (entry_id, runtime objects) for a service call."""
    entry_id = call.data.get(const.FIELD_CONFIG_ENTRY_ID) or get_first_entry_id(hass)
    if not entry_id:
        raise ServiceValidationError(const.ERROR_NO_ENTRY_FOUND)

    runtime = hass.data.get(const.DOMAIN, {}).get(entry_id)
    if runtime is None:
        raise ServiceValidationError(const.ERROR_ENTRY_NOT_FOUND_FMT.format(entry_id))
    return entry_id, runtime


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Civic Badges services."""
    if hass.services.has_service(const.DOMAIN, const.SERVICE_REFRESH):
        return

    async def handle_refresh(call: ServiceCall) -> None:
        """Handle a manual reconciliation."""
        entry_id, runtime = _resolve_entry(hass, call)
        scheduler = runtime[const.RUNTIME_SCHEDULER]

        outcome = await scheduler.async_refresh()
        const.LOGGER.info("INFO: Manual refresh for %s: %s", entry_id, outcome)
        if outcome == SyncOutcome.FAILED:
            raise HomeAssistantError(scheduler.last_error or "Report sync failed")

    async def handle_record_submission(call: ServiceCall) -> None:
        """Handle an optimistic report count bump."""
        entry_id, runtime = _resolve_entry(hass, call)
        count = call.data[const.FIELD_COUNT]

        new_count = await runtime[const.RUNTIME_SCHEDULER].async_record_submission(count)
        const.LOGGER.info(
            "INFO: Recorded %s submission(s) for %s, display count %s",
            count,
            entry_id,
            new_count,
        )

    async def handle_export_certificate(call: ServiceCall) -> ServiceResponse:
        """Handle exporting a certificate for an earned badge."""
        entry_id, runtime = _resolve_entry(hass, call)
        ledger = runtime[const.RUNTIME_LEDGER]
        table = runtime[const.RUNTIME_TABLE]

        tier_name = call.data.get(const.FIELD_TIER_NAME)
        if tier_name:
            tier = table.get(tier_name)
            if tier is None:
                raise ServiceValidationError(
                    const.ERROR_TIER_NOT_FOUND_FMT.format(tier_name)
                )
            badge = ledger.get(tier_name)
            if badge is None:
                raise ServiceValidationError(
                    const.ERROR_TIER_NOT_EARNED_FMT.format(tier_name)
                )
        else:
            badge = ledger.top_badge
            if badge is None:
                raise ServiceValidationError(const.ERROR_NO_BADGE_EARNED)
            tier = table.get(badge.tier_name)

        recipient_name = call.data.get(const.FIELD_RECIPIENT_NAME)
        if recipient_name is None:
            entry = hass.config_entries.async_get_entry(entry_id)
            recipient_name = entry.data.get(const.CONF_RECIPIENT_NAME) if entry else None

        certificate = CertificateEngine.build_certificate(
            recipient_name, tier, badge.earned_at
        )
        document = await runtime[const.RUNTIME_RENDERER].async_export(certificate)
        if document is None:
            raise HomeAssistantError(const.ERROR_EXPORT_UNAVAILABLE)

        const.LOGGER.info(
            "INFO: Certificate %s exported for %s",
            certificate.certificate_id,
            entry_id,
        )
        return dict(document.as_response())

    async def handle_reset(call: ServiceCall) -> None:
        """Handle clearing all badge data of an entry."""
        entry_id, runtime = _resolve_entry(hass, call)

        await runtime[const.RUNTIME_SCHEDULER].async_reset()
        const.LOGGER.info("INFO: Civic Badges data reset for %s", entry_id)

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REFRESH,
        handle_refresh,
        schema=REFRESH_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RECORD_SUBMISSION,
        handle_record_submission,
        schema=RECORD_SUBMISSION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_EXPORT_CERTIFICATE,
        handle_export_certificate,
        schema=EXPORT_CERTIFICATE_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RESET,
        handle_reset,
        schema=RESET_SCHEMA,
    )

    const.LOGGER.info("INFO: Civic Badges services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Civic Badges services when the last entry unloads."""
    for service in SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Civic Badges services have been unregistered")
