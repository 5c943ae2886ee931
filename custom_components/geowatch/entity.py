"""Base entity for the Geowatch integration."""

from __future__ import annotations

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import GeowatchCoordinator


class GeowatchEntity(CoordinatorEntity[GeowatchCoordinator]):
    """Base class for Geowatch entities."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: GeowatchCoordinator) -> None:
        """Initialize the entity."""
        super().__init__(coordinator)
        entry = coordinator.config_entry
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=entry.title,
            manufacturer="Geowatch",
            model=f"Location provider ({coordinator.geolocation.revision})",
            entry_type=DeviceEntryType.SERVICE,
        )
