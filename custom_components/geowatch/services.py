"""Services for the Geowatch integration."""

from __future__ import annotations

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall, callback
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
import homeassistant.helpers.config_validation as cv

from .const import (
    CONF_ALLOWED,
    CONF_CONFIG_ENTRY_ID,
    DOMAIN,
    SERVICE_GET_CURRENT_POSITION,
    SERVICE_SET_ALLOWED,
    SERVICE_STOP_WATCHING,
    SERVICE_WATCH_POSITION,
)
from .coordinator import GeowatchCoordinator
from .errors import GeowatchError

SERVICE_SCHEMA = vol.Schema({vol.Optional(CONF_CONFIG_ENTRY_ID): cv.string})
SET_ALLOWED_SCHEMA = SERVICE_SCHEMA.extend({vol.Required(CONF_ALLOWED): cv.boolean})

SERVICES = (
    SERVICE_SET_ALLOWED,
    SERVICE_GET_CURRENT_POSITION,
    SERVICE_WATCH_POSITION,
    SERVICE_STOP_WATCHING,
)


def _coordinators(hass: HomeAssistant, call: ServiceCall) -> list[GeowatchCoordinator]:
    """Return the coordinators a service call targets."""
    coordinators: dict[str, GeowatchCoordinator] = hass.data.get(DOMAIN, {})
    if (entry_id := call.data.get(CONF_CONFIG_ENTRY_ID)) is None:
        return list(coordinators.values())
    if entry_id not in coordinators:
        raise ServiceValidationError(f"Geowatch entry {entry_id} is not loaded")
    return [coordinators[entry_id]]


@callback
def async_setup_services(hass: HomeAssistant) -> None:
    """Register the Geowatch services."""
    if hass.services.has_service(DOMAIN, SERVICE_SET_ALLOWED):
        return

    async def _async_set_allowed(call: ServiceCall) -> None:
        for coordinator in _coordinators(hass, call):
            coordinator.geolocation.allowed = call.data[CONF_ALLOWED]
            coordinator.async_publish()
            coordinator.async_sync_watch()

    async def _async_get_current_position(call: ServiceCall) -> None:
        failures: list[str] = []
        for coordinator in _coordinators(hass, call):
            try:
                await coordinator.geolocation.get_current_position()
            except GeowatchError as err:
                failures.append(f"{coordinator.config_entry.title}: {err}")
        if failures:
            raise HomeAssistantError(f"Unable to get position: {'; '.join(failures)}")

    async def _async_watch_position(call: ServiceCall) -> None:
        failures: list[str] = []
        for coordinator in _coordinators(hass, call):
            future = coordinator.geolocation.watch_position()
            coordinator.async_publish()
            try:
                await future
            except GeowatchError as err:
                failures.append(f"{coordinator.config_entry.title}: {err}")
            finally:
                coordinator.async_publish()
        if failures:
            raise HomeAssistantError(f"Unable to watch position: {'; '.join(failures)}")
    async def _async_stop_watching(call: ServiceCall) -> None:
        for coordinator in _coordinators(hass, call):
            coordinator.geolocation.stop_watching()
            coordinator.async_publish()

    hass.services.async_register(
        DOMAIN, SERVICE_SET_ALLOWED, _async_set_allowed, schema=SET_ALLOWED_SCHEMA
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_GET_CURRENT_POSITION,
        _async_get_current_position,
        schema=SERVICE_SCHEMA,
    )
    hass.services.async_register(
        DOMAIN, SERVICE_WATCH_POSITION, _async_watch_position, schema=SERVICE_SCHEMA
    )
    hass.services.async_register(
        DOMAIN, SERVICE_STOP_WATCHING, _async_stop_watching, schema=SERVICE_SCHEMA
    )


@callback
def async_unload_services(hass: HomeAssistant) -> None:
    """Remove the Geowatch services."""
    for service in SERVICES:
        hass.services.async_remove(DOMAIN, service)
