"""Persisted preferences for the Geowatch integration."""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.storage import Store

from .const import STORAGE_KEY, STORAGE_SAVE_DELAY, STORAGE_VERSION


class GeowatchPreferenceStore:
    """Key-value preferences kept in Home Assistant's storage.

    Values are readable and writable synchronously once loaded; writes are
    flushed to disk in the background.
    """

    def __init__(self, hass: HomeAssistant) -> None:
        """Initialize the store."""
        self._store: Store[dict[str, Any]] = Store(hass, STORAGE_VERSION, STORAGE_KEY)
        self._data: dict[str, Any] = {}

    async def async_load(self) -> None:
        """Load persisted preferences."""
        if (data := await self._store.async_load()) is not None:
            self._data = dict(data)

    def get(self, key: str, default: Any = None) -> Any:
        """Return a stored value."""
        return self._data.get(key, default)

    @callback
    def set(self, key: str, value: Any) -> None:
        """Store a value and schedule a save."""
        self._data[key] = value
        self._store.async_delay_save(self._data_to_save, STORAGE_SAVE_DELAY)

    @callback
    def remove(self, key: str) -> None:
        """Forget a stored value."""
        if self._data.pop(key, None) is not None:
            self._store.async_delay_save(self._data_to_save, STORAGE_SAVE_DELAY)

    @callback
    def _data_to_save(self) -> dict[str, Any]:
        return dict(self._data)
