"""Interface of the asynchronous location provider."""

from __future__ import annotations

from collections.abc import Callable, MutableMapping
from typing import Any, Protocol

from .errors import PositionErrorRecord
from .models import PositionOptions, PositionSample

SuccessCallback = Callable[[PositionSample], None]
FailureCallback = Callable[[PositionErrorRecord], None]


class LocationProvider(Protocol):
    """Protocol describing the location service wrapped by Geolocation.

    Callbacks are invoked on a later turn of the event loop: at most once
    for ``get_current_position`` and any number of times for a watch until
    it is cleared.
    """

    settings: MutableMapping[str, Any]

    @property
    def last_position(self) -> PositionSample | None:
        """Return the most recent sample the provider produced."""

    def get_current_position(
        self,
        success: SuccessCallback,
        failure: FailureCallback,
        options: PositionOptions,
    ) -> None:
        """Request a single position."""

    def watch_position(
        self,
        success: SuccessCallback,
        failure: FailureCallback,
        options: PositionOptions,
    ) -> int:
        """Register a continuous watch and return its id.

        Raises ProviderRegistrationError if the watch cannot be registered.
        """

    def clear_watch(self, watch_id: int) -> None:
        """Cancel a watch registered with ``watch_position``."""
