"""The Geowatch integration."""

from __future__ import annotations

from datetime import timedelta
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_URL, EVENT_HOMEASSISTANT_STOP, Platform
from homeassistant.core import Event, HomeAssistant, callback
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .api import GeowatchApiClient
from .const import (
    CONF_API_KEY,
    CONF_WATCH_INTERVAL,
    DEFAULT_WATCH_INTERVAL,
    DOMAIN,
    PREFERENCE_KEY_TEMPLATE,
    TEARDOWN_REASON_DISABLE,
)
from .coordinator import GeowatchCoordinator
from .geolocation import Geolocation
from .models import GeolocationConfig
from .services import async_setup_services, async_unload_services
from .storage import GeowatchPreferenceStore

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.BINARY_SENSOR, Platform.DEVICE_TRACKER, Platform.SENSOR]

DATA_PREFERENCES = f"{DOMAIN}_preferences"


async def _async_get_preference_store(hass: HomeAssistant) -> GeowatchPreferenceStore:
    """Return the shared preference store, loading it on first use."""
    if (store := hass.data.get(DATA_PREFERENCES)) is None:
        store = GeowatchPreferenceStore(hass)
        await store.async_load()
        hass.data[DATA_PREFERENCES] = store
    return store


def _watch_interval(entry: ConfigEntry) -> timedelta:
    return timedelta(
        seconds=entry.options.get(
            CONF_WATCH_INTERVAL, DEFAULT_WATCH_INTERVAL.total_seconds()
        )
    )


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Geowatch from a config entry."""
    store = await _async_get_preference_store(hass)
    api_client = GeowatchApiClient(
        session=async_get_clientsession(hass),
        url=entry.data[CONF_URL],
        api_key=entry.data.get(CONF_API_KEY),
        watch_interval=_watch_interval(entry),
    )

    geolocation = Geolocation()
    geolocation.initialize(
        GeolocationConfig.from_entry_data(entry.entry_id, entry.data, entry.options),
        api_client,
        store,
    )

    coordinator = GeowatchCoordinator(hass, entry, api_client, geolocation)
    coordinator.async_start()

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = coordinator

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    @callback
    def _async_teardown(event: Event) -> None:
        geolocation.teardown()

    entry.async_on_unload(
        hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, _async_teardown)
    )

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    async_setup_services(hass)

    coordinator.async_sync_watch()
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        coordinator: GeowatchCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
        # disabling the entry also revokes the permission
        reason = TEARDOWN_REASON_DISABLE if entry.disabled_by else None
        coordinator.geolocation.teardown(reason)
        coordinator.async_stop()
        coordinator.api_client.close()
        if not hass.data[DOMAIN]:
            async_unload_services(hass)
    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Forget the persisted permission of a removed entry."""
    store = await _async_get_preference_store(hass)
    store.remove(PREFERENCE_KEY_TEMPLATE.format(entry.entry_id))


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply changed options to the running instance."""
    coordinator: GeowatchCoordinator = hass.data[DOMAIN][entry.entry_id]
    coordinator.async_apply_options()
    coordinator.api_client.watch_interval = _watch_interval(entry)
    coordinator.async_sync_watch()

