# File: options_flow.py
"""Options flow for the Civic Badges integration.

A single form: poll interval, tier table and persistent notifications.
Saving new options reloads the entry (see the update listener in __init__).
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from .helpers import flow_helpers as fh


class CivicBadgesOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for the poll interval, tier table and notifications."""

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Show and validate the options form."""
        errors: dict[str, str] = {}
        options = dict(self.config_entry.options)

        if user_input is not None:
            errors = fh.validate_options_inputs(user_input)
            if not errors:
                const.LOGGER.debug(
                    "DEBUG: Saving Civic Badges options for %s",
                    self.config_entry.entry_id,
                )
                return self.async_create_entry(title="", data=user_input)
            options.update(user_input)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=fh.build_options_schema(options),
            errors=errors,
        )
