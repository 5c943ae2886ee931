"""DataUpdateCoordinator for Geowatch."""

from __future__ import annotations

import asyncio
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.update_coordinator import (
    DataUpdateCoordinator,
    UpdateFailed,
)

from .api import GeowatchApiClient
from .const import (
    ATTR_ERROR,
    ATTR_TIMEOUT,
    CONF_ENABLE_HIGH_ACCURACY,
    CONF_TIMEOUT,
    CONF_WATCH,
    DEFAULT_ENABLE_HIGH_ACCURACY,
    DEFAULT_TIMEOUT,
    DOMAIN,
    EVENT_POSITION_ERROR,
)
from .errors import GeolocationError
from .geolocation import Geolocation
from .models import Address, Coordinates, GeowatchData

_LOGGER = logging.getLogger(__name__)


class GeowatchCoordinator(DataUpdateCoordinator[GeowatchData]):
    """Push position notifications from Geolocation to entities.

    There is no polling interval; a manual refresh performs a single
    position acquisition.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        api_client: GeowatchApiClient,
        geolocation: Geolocation,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            config_entry=config_entry,
            update_interval=None,
        )
        self.api_client = api_client
        self.geolocation = geolocation
        self.data = self._snapshot()
        self._unsubscribers: list[CALLBACK_TYPE] = []

    @callback
    def async_start(self) -> None:
        """Subscribe to the geolocation channels."""
        channels = self.geolocation.channels
        self._unsubscribers = [
            channels.coords.async_subscribe(self._handle_coords),
            channels.address.async_subscribe(self._handle_address),
            channels.error.async_subscribe(self._handle_error),
        ]

    @callback
    def async_stop(self) -> None:
        """Unsubscribe from the geolocation channels."""
        while self._unsubscribers:
            self._unsubscribers.pop()()

    @callback
    def async_apply_options(self) -> None:
        """Push option changes to the geolocation instance.

        Changes take effect on the next acquisition.
        """
        options = self.config_entry.options
        self.geolocation.enable_high_accuracy = options.get(
            CONF_ENABLE_HIGH_ACCURACY, DEFAULT_ENABLE_HIGH_ACCURACY
        )
        self.geolocation.timeout = int(options.get(CONF_TIMEOUT, DEFAULT_TIMEOUT))

    @callback
    def async_sync_watch(self) -> None:
        """Start or stop watching to match the entry's watch option."""
        geolocation = self.geolocation
        if not self.config_entry.options.get(CONF_WATCH):
            if geolocation.is_watching():
                geolocation.stop_watching()
                self.async_publish()
            return

        if not geolocation.allowed or geolocation.is_watching():
            return

        _LOGGER.debug("Starting position watch for %s", self.config_entry.title)
        geolocation.watch_position().add_done_callback(_log_failure)
        self.async_publish()

    @callback
    def async_publish(self) -> None:
        """Push the current geolocation state to entities."""
        self.async_set_updated_data(self._snapshot())

    async def _async_update_data(self) -> GeowatchData:
        """Acquire a single position."""
        try:
            await self.geolocation.get_current_position()
        except GeolocationError as err:
            raise UpdateFailed(f"Unable to acquire position: {err.kind}") from err
        return self._snapshot()

    def _snapshot(self) -> GeowatchData:
        return GeowatchData(
            position=self.geolocation.position,
            address=self.geolocation.address,
            watching=self.geolocation.is_watching(),
        )

    @callback
    def _handle_coords(self, coords: Coordinates) -> None:
        _LOGGER.debug("New coordinates %s, %s", coords.latitude, coords.longitude)
        self.async_publish()

    @callback
    def _handle_address(self, address: Address) -> None:
        _LOGGER.debug("New address %s", address)
        self.async_publish()

    @callback
    def _handle_error(self, error: GeolocationError) -> None:
        _LOGGER.debug("Position error %s: %s", error.kind, error)
        event_data = {
            "entry_id": self.config_entry.entry_id,
            ATTR_ERROR: error.kind.value,
        }
        if error.timeout is not None:
            event_data[ATTR_TIMEOUT] = error.timeout
        self.hass.bus.async_fire(EVENT_POSITION_ERROR, event_data)


def _log_failure(future: asyncio.Future) -> None:
    """Consume the outcome of a watch nobody awaits."""
    if future.cancelled():
        return
    if (err := future.exception()) is not None:
        _LOGGER.debug("Position watch failed: %s", err)
