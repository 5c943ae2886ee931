"""Device tracker platform for Geowatch."""

from __future__ import annotations

from typing import Any

from homeassistant.components.device_tracker import SourceType, TrackerEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import (
    ATTR_ADDRESS,
    ATTR_ALTITUDE,
    ATTR_HEADING,
    ATTR_SPEED,
    ATTR_TIMESTAMP,
    DOMAIN,
)
from .coordinator import GeowatchCoordinator
from .entity import GeowatchEntity


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the Geowatch device tracker from a config entry."""
    coordinator: GeowatchCoordinator = hass.data[DOMAIN][config_entry.entry_id]
    async_add_entities([GeowatchTracker(coordinator)])


class GeowatchTracker(GeowatchEntity, TrackerEntity):
    """Represent the located device."""

    _attr_name = None

    def __init__(self, coordinator: GeowatchCoordinator) -> None:
        """Initialize the tracker entity."""
        super().__init__(coordinator)
        self._attr_unique_id = f"geowatch_{coordinator.config_entry.entry_id}"

    @property
    def source_type(self) -> SourceType:
        """Return the source type."""
        return SourceType.GPS

    @property
    def latitude(self) -> float | None:
        """Return latitude value of the device."""
        if self.coordinator.data.position is None:
            return None
        return self.coordinator.data.position.coords.latitude

    @property
    def longitude(self) -> float | None:
        """Return longitude value of the device."""
        if self.coordinator.data.position is None:
            return None
        return self.coordinator.data.position.coords.longitude

    @property
    def location_accuracy(self) -> float:
        """Return the location accuracy of the device."""
        if self.coordinator.data.position is None:
            return 0
        return self.coordinator.data.position.coords.accuracy

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Return additional state attributes."""
        data = self.coordinator.data
        if data.position is None:
            return None

        coords = data.position.coords
        attrs: dict[str, Any] = {ATTR_TIMESTAMP: data.position.timestamp.isoformat()}

        if (altitude := coords.altitude) is not None:
            attrs[ATTR_ALTITUDE] = altitude
        if (heading := coords.heading) is not None:
            attrs[ATTR_HEADING] = heading
        if (speed := coords.speed) is not None:
            attrs[ATTR_SPEED] = speed
        if (address := data.address) is not None:
            attrs[ATTR_ADDRESS] = dict(address)

        return attrs
