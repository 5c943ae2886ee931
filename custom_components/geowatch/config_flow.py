"""Config flow for Geowatch integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_NAME, CONF_URL
from homeassistant.core import callback
import homeassistant.helpers.config_validation as cv

from .const import (
    CONF_API_KEY,
    CONF_ENABLE_HIGH_ACCURACY,
    CONF_PROVIDER_VERSION,
    CONF_TIMEOUT,
    CONF_WATCH,
    CONF_WATCH_INTERVAL,
    DEFAULT_ENABLE_HIGH_ACCURACY,
    DEFAULT_NAME,
    DEFAULT_PROVIDER_VERSION,
    DEFAULT_TIMEOUT,
    DEFAULT_URL,
    DEFAULT_WATCH_INTERVAL,
    DOMAIN,
)
from .revision import detect_revision

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_NAME, default=DEFAULT_NAME): str,
        vol.Required(CONF_URL, default=DEFAULT_URL): str,
        vol.Optional(CONF_API_KEY): str,
        vol.Required(CONF_PROVIDER_VERSION, default=DEFAULT_PROVIDER_VERSION): str,
    }
)

OPTIONS_SCHEMA = vol.Schema(
    {
        vol.Required(
            CONF_ENABLE_HIGH_ACCURACY, default=DEFAULT_ENABLE_HIGH_ACCURACY
        ): bool,
        vol.Required(CONF_TIMEOUT, default=DEFAULT_TIMEOUT): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Required(CONF_WATCH, default=False): bool,
        vol.Required(
            CONF_WATCH_INTERVAL, default=int(DEFAULT_WATCH_INTERVAL.total_seconds())
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
    }
)


class GeowatchConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Geowatch."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> GeowatchOptionsFlow:
        """Return the options flow."""
        return GeowatchOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the service details step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            try:
                url = cv.url(user_input[CONF_URL])
            except vol.Invalid:
                errors[CONF_URL] = "invalid_url"
            else:
                await self.async_set_unique_id(url)
                self._abort_if_unique_id_configured()

                version = user_input[CONF_PROVIDER_VERSION].strip()
                _LOGGER.debug(
                    "Configuring %s as %s provider", url, detect_revision(version)
                )
                data = {CONF_URL: url, CONF_PROVIDER_VERSION: version}
                if api_key := user_input.get(CONF_API_KEY):
                    data[CONF_API_KEY] = api_key

                return self.async_create_entry(title=user_input[CONF_NAME], data=data)

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )


class GeowatchOptionsFlow(OptionsFlow):
    """Handle acquisition options."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the options."""
        if user_input is not None:
            return self.async_create_entry(data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=self.add_suggested_values_to_schema(
                OPTIONS_SCHEMA, self.config_entry.options
            ),
        )
