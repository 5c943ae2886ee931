"""Typed notification channels."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from typing import Generic, TypeVar

from homeassistant.core import CALLBACK_TYPE, callback

from .errors import GeolocationError
from .models import Address, Coordinates

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class Channel(Generic[_T]):
    """Deliver payloads of one kind to every subscribed listener."""

    def __init__(self, name: str) -> None:
        """Initialize the channel."""
        self.name = name
        self._listeners: list[Callable[[_T], None]] = []

    @property
    def listener_count(self) -> int:
        """Return the number of subscribed listeners."""
        return len(self._listeners)

    @callback
    def async_subscribe(self, listener: Callable[[_T], None]) -> CALLBACK_TYPE:
        """Subscribe a listener, returning a function that unsubscribes it."""
        self._listeners.append(listener)

        @callback
        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @callback
    def async_subscribe_once(self, listener: Callable[[_T], None]) -> CALLBACK_TYPE:
        """Subscribe a listener that is removed after its first delivery."""

        @callback
        def _once(payload: _T) -> None:
            unsubscribe()
            listener(payload)

        unsubscribe = self.async_subscribe(_once)
        return unsubscribe

    @callback
    def emit(self, payload: _T) -> None:
        """Deliver a payload to all listeners."""
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Error in %s listener %s", self.name, listener)


@dataclass
class GeolocationChannels:
    """The notification channels exposed by a Geolocation instance."""

    coords: Channel[Coordinates] = field(default_factory=lambda: Channel("coords"))
    address: Channel[Address] = field(default_factory=lambda: Channel("address"))
    error: Channel[GeolocationError] = field(default_factory=lambda: Channel("error"))
