"""Data models for the Geowatch integration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .const import (
    CONF_ENABLE_HIGH_ACCURACY,
    CONF_PROVIDER_VERSION,
    CONF_TIMEOUT,
    DEFAULT_ENABLE_HIGH_ACCURACY,
    DEFAULT_PROVIDER_VERSION,
    DEFAULT_TIMEOUT,
    PREFERENCE_KEY_TEMPLATE,
)

Address = Mapping[str, str]


@dataclass(frozen=True)
class Coordinates:
    """A single position fix.

    ``heading`` is degrees clockwise from true north, NaN when the device is
    stationary and None when the provider cannot report it.
    """

    latitude: float
    longitude: float
    accuracy: float
    altitude: float | None = None
    altitude_accuracy: float | None = None
    heading: float | None = None
    speed: float | None = None


# eq=False keeps identity comparison, which change detection relies on
@dataclass(frozen=True, eq=False)
class PositionSample:
    """A reading produced by the location provider."""

    timestamp: datetime
    coords: Coordinates
    address: Address | None = None


@dataclass(frozen=True)
class PositionOptions:
    """Acquisition options handed to the provider for a single call."""

    enable_high_accuracy: bool = DEFAULT_ENABLE_HIGH_ACCURACY
    # milliseconds
    timeout: int = DEFAULT_TIMEOUT


@dataclass
class GeolocationConfig:
    """Configuration used to initialize a Geolocation instance."""

    enable_high_accuracy: bool = DEFAULT_ENABLE_HIGH_ACCURACY
    timeout: int = DEFAULT_TIMEOUT
    provider_version: str = DEFAULT_PROVIDER_VERSION
    preference_key: str = PREFERENCE_KEY_TEMPLATE.format("default")

    @classmethod
    def from_entry_data(
        cls, entry_id: str, data: Mapping[str, Any], options: Mapping[str, Any]
    ) -> GeolocationConfig:
        """Build the config from config entry data and options."""
        return cls(
            enable_high_accuracy=options.get(
                CONF_ENABLE_HIGH_ACCURACY, DEFAULT_ENABLE_HIGH_ACCURACY
            ),
            timeout=int(options.get(CONF_TIMEOUT, DEFAULT_TIMEOUT)),
            provider_version=data.get(CONF_PROVIDER_VERSION, DEFAULT_PROVIDER_VERSION),
            preference_key=PREFERENCE_KEY_TEMPLATE.format(entry_id),
        )


@dataclass
class GeowatchData:
    """Snapshot pushed to entities by the coordinator."""

    position: PositionSample | None = None
    address: Address | None = None
    watching: bool = False
