"""Sensor platform for Geowatch."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import math

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import DEGREE, UnitOfLength, UnitOfSpeed
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import GeowatchCoordinator
from .entity import GeowatchEntity
from .models import Coordinates


@dataclass(frozen=True, kw_only=True)
class GeowatchSensorEntityDescription(SensorEntityDescription):
    """Describe a Geowatch sensor entity."""

    value_fn: Callable[[Coordinates], float | None]


SENSOR_DESCRIPTIONS: tuple[GeowatchSensorEntityDescription, ...] = (
    GeowatchSensorEntityDescription(
        key="accuracy",
        translation_key="accuracy",
        device_class=SensorDeviceClass.DISTANCE,
        native_unit_of_measurement=UnitOfLength.METERS,
        state_class=SensorStateClass.MEASUREMENT,
        value_fn=lambda coords: coords.accuracy,
    ),
    GeowatchSensorEntityDescription(
        key="altitude",
        translation_key="altitude",
        device_class=SensorDeviceClass.DISTANCE,
        native_unit_of_measurement=UnitOfLength.METERS,
        state_class=SensorStateClass.MEASUREMENT,
        value_fn=lambda coords: coords.altitude,
    ),
    GeowatchSensorEntityDescription(
        key="altitude_accuracy",
        translation_key="altitude_accuracy",
        device_class=SensorDeviceClass.DISTANCE,
        native_unit_of_measurement=UnitOfLength.METERS,
        state_class=SensorStateClass.MEASUREMENT,
        entity_registry_enabled_default=False,
        value_fn=lambda coords: coords.altitude_accuracy,
    ),
    GeowatchSensorEntityDescription(
        key="heading",
        translation_key="heading",
        native_unit_of_measurement=DEGREE,
        state_class=SensorStateClass.MEASUREMENT,
        # NaN while stationary
        value_fn=lambda coords: (
            None if coords.heading is None or math.isnan(coords.heading)
            else coords.heading
        ),
    ),
    GeowatchSensorEntityDescription(
        key="speed",
        translation_key="speed",
        device_class=SensorDeviceClass.SPEED,
        native_unit_of_measurement=UnitOfSpeed.METERS_PER_SECOND,
        state_class=SensorStateClass.MEASUREMENT,
        value_fn=lambda coords: coords.speed,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Geowatch sensors from a config entry."""
    coordinator: GeowatchCoordinator = hass.data[DOMAIN][config_entry.entry_id]
    async_add_entities(
        GeowatchSensor(coordinator, description) for description in SENSOR_DESCRIPTIONS
    )


class GeowatchSensor(GeowatchEntity, SensorEntity):
    """Represent a Geowatch position sensor."""

    entity_description: GeowatchSensorEntityDescription

    def __init__(
        self,
        coordinator: GeowatchCoordinator,
        description: GeowatchSensorEntityDescription,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self.entity_description = description
        self._attr_unique_id = (
            f"geowatch_{coordinator.config_entry.entry_id}_{description.key}"
        )

    @property
    def native_value(self) -> float | None:
        """Return the sensor value."""
        position = self.coordinator.data.position
        if position is None:
            return None
        return self.entity_description.value_fn(position.coords)
