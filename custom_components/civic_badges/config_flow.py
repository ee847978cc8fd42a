# File: config_flow.py
"""Config flow for the Civic Badges integration.

One config entry per reporting identity. The entry data holds the identity
(recipient name, API URL, token, user id); tunables live in options.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .helpers import flow_helpers as fh
from .options_flow import CivicBadgesOptionsFlowHandler


class CivicBadgesConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Civic Badges."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Ask for the recipient name, the API URL and the identity."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = fh.validate_user_inputs(user_input)
            if not errors:
                data = fh.build_user_data(user_input)
                user_id = data.get(const.CONF_USER_ID)
                if user_id:
                    await self.async_set_unique_id(user_id)
                    self._abort_if_unique_id_configured()

                const.LOGGER.info(
                    "INFO: Creating Civic Badges entry for '%s'",
                    data[const.CONF_RECIPIENT_NAME],
                )
                return self.async_create_entry(
                    title=data[const.CONF_RECIPIENT_NAME], data=data
                )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=fh.build_user_schema(user_input),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> CivicBadgesOptionsFlowHandler:
        """Return the Options Flow."""
        return CivicBadgesOptionsFlowHandler()
