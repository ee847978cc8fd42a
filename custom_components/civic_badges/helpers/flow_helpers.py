# File: flow_helpers.py
"""Helpers for the Civic Badges integration's Config and Options flow.

Each form has two layers:
1. Schema Building: build_<form>_schema() - voluptuous schema for the HA UI
2. UI Validation: validate_<form>_inputs() - returns an errors dict (empty = ok)

The tier table text is validated through ThresholdTable itself, so the options
form and entry setup can never disagree about what a valid table is.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from homeassistant.helpers import selector
import voluptuous as vol

from .. import const
from ..engines.badge_engine import ThresholdTable
from ..exceptions import InvalidThresholdConfig

# ----------------------------------------------------------------------------------
# USER STEP (identity and API)
# ----------------------------------------------------------------------------------


def build_user_schema(defaults: dict[str, Any] | None = None) -> vol.Schema:
    """Build the schema for recipient name, API URL and identity."""
    defaults = defaults or {}
    return vol.Schema(
        {
            vol.Required(
                const.CONF_RECIPIENT_NAME,
                default=defaults.get(
                    const.CONF_RECIPIENT_NAME, const.DEFAULT_RECIPIENT_NAME
                ),
            ): str,
            vol.Required(
                const.CONF_API_URL, default=defaults.get(const.CONF_API_URL, "")
            ): selector.TextSelector(
                selector.TextSelectorConfig(type=selector.TextSelectorType.URL)
            ),
            vol.Optional(
                const.CONF_ACCESS_TOKEN,
                description={
                    "suggested_value": defaults.get(const.CONF_ACCESS_TOKEN)
                },
            ): selector.TextSelector(
                selector.TextSelectorConfig(type=selector.TextSelectorType.PASSWORD)
            ),
            vol.Optional(
                const.CONF_USER_ID,
                description={"suggested_value": defaults.get(const.CONF_USER_ID)},
            ): str,
        }
    )


def validate_user_inputs(user_input: dict[str, Any]) -> dict[str, str]:
    """Validate the user step.

    Returns:
        Dictionary of errors keyed by field (empty if validation passes).
    """
    errors: dict[str, str] = {}

    parsed = urlparse(str(user_input.get(const.CONF_API_URL, "")).strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        errors[const.CONF_API_URL] = const.TRANS_KEY_ERROR_INVALID_URL

    return errors


def build_user_data(user_input: dict[str, Any]) -> dict[str, Any]:
    """Normalize user step input into config entry data."""
    data: dict[str, Any] = {
        const.CONF_RECIPIENT_NAME: str(
            user_input.get(const.CONF_RECIPIENT_NAME, "")
        ).strip()
        or const.DEFAULT_RECIPIENT_NAME,
        const.CONF_API_URL: str(user_input[const.CONF_API_URL]).strip().rstrip("/"),
    }
    for key in (const.CONF_ACCESS_TOKEN, const.CONF_USER_ID):
        value = str(user_input.get(key) or "").strip()
        if value:
            data[key] = value
    return data


# ----------------------------------------------------------------------------------
# OPTIONS (poll interval, tier table, notifications)
# ----------------------------------------------------------------------------------


def build_options_schema(options: dict[str, Any]) -> vol.Schema:
    """Build the options schema, prefilled from the current options."""
    return vol.Schema(
        {
            vol.Required(
                const.CONF_POLL_INTERVAL,
                default=options.get(
                    const.CONF_POLL_INTERVAL, const.DEFAULT_POLL_INTERVAL
                ),
            ): vol.All(
                vol.Coerce(int),
                vol.Range(min=const.MIN_POLL_INTERVAL, max=const.MAX_POLL_INTERVAL),
            ),
            vol.Required(
                const.CONF_THRESHOLDS,
                default=options.get(
                    const.CONF_THRESHOLDS, ThresholdTable.default().to_config()
                ),
            ): selector.TextSelector(selector.TextSelectorConfig(multiline=True)),
            vol.Required(
                const.CONF_PERSISTENT_NOTIFICATIONS,
                default=options.get(
                    const.CONF_PERSISTENT_NOTIFICATIONS,
                    const.DEFAULT_PERSISTENT_NOTIFICATIONS,
                ),
            ): selector.BooleanSelector(),
        }
    )


def validate_options_inputs(user_input: dict[str, Any]) -> dict[str, str]:
    """Validate the options form; the tier table must parse (blank = default)."""
    errors: dict[str, str] = {}
    try:
        table_from_options(user_input)
    except InvalidThresholdConfig as err:
        const.LOGGER.debug("DEBUG: Rejected threshold options: %s", err)
        errors[const.CONF_THRESHOLDS] = const.TRANS_KEY_ERROR_INVALID_THRESHOLDS
    return errors


def table_from_options(options: dict[str, Any]) -> ThresholdTable:
    """Return the tier table configured in options, or the default table.

    Raises:
        InvalidThresholdConfig: if the stored table text is invalid
    """
    text = options.get(const.CONF_THRESHOLDS)
    if not text or not str(text).strip():
        return ThresholdTable.default()
    return ThresholdTable.from_config(str(text))
