"""Binary sensor platform for Geowatch."""

from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import GeowatchCoordinator
from .entity import GeowatchEntity


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Geowatch binary sensors from a config entry."""
    coordinator: GeowatchCoordinator = hass.data[DOMAIN][config_entry.entry_id]
    async_add_entities([GeowatchWatchingSensor(coordinator)])


class GeowatchWatchingSensor(GeowatchEntity, BinarySensorEntity):
    """Binary sensor indicating whether the position is being watched."""

    _attr_translation_key = "watching"

    def __init__(self, coordinator: GeowatchCoordinator) -> None:
        """Initialize the binary sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"geowatch_{coordinator.config_entry.entry_id}_watching"

    @property
    def is_on(self) -> bool:
        """Return true if a watch is registered with the provider."""
        return self.coordinator.data.watching
