"""Permission gated, observable wrapper around a location provider.

Register for the ``coords`` channel to be told whenever a new position is
located::

    geolocation.channels.coords.async_subscribe_once(
        lambda coords: _LOGGER.info("got coords %s %s", coords.latitude, coords.longitude)
    )
    geolocation.get_current_position()

or await the completion handle returned by the acquisition call::

    position = await geolocation.get_current_position()

``watch_position`` keeps a single watch registered with the provider and
notifies the channels every time the position changes, which can be quite
often. Legacy provider revisions also resolve an address, published on the
``address`` channel.

Nothing is acquired until ``allowed`` is set to True.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
import logging

from homeassistant.core import callback

from .channels import GeolocationChannels
from .const import TEARDOWN_REASON_DISABLE
from .errors import (
    GeolocationError,
    GeowatchError,
    PositionErrorRecord,
    classify_error,
    not_allowed_error,
)
from .models import (
    Address,
    Coordinates,
    GeolocationConfig,
    PositionOptions,
    PositionSample,
)
from .permission import PermissionGate, PreferenceStore
from .provider import LocationProvider
from .revision import ProviderRevision, ProviderVersionAdapter

_LOGGER = logging.getLogger(__name__)


class Geolocation:
    """Expose a location provider as a permission gated position source."""

    def __init__(self) -> None:
        """Create an uninitialized instance; listeners may subscribe already."""
        self.channels = GeolocationChannels()
        self._provider: LocationProvider | None = None
        self._gate: PermissionGate | None = None
        self._adapter: ProviderVersionAdapter | None = None
        self._options = PositionOptions()
        self._watch_id: int | None = None
        # identifies the live watch registration; late callbacks of a
        # cleared watch carry a stale token
        self._watch_token: object | None = None
        # handle of the running watch until it settles or the watch stops
        self._watch_future: asyncio.Future[PositionSample | None] | None = None
        self._position: PositionSample | None = None
        self._address: Address | None = None

    @callback
    def initialize(
        self,
        config: GeolocationConfig,
        provider: LocationProvider,
        store: PreferenceStore,
    ) -> None:
        """Bind the provider and preference store and read persisted state."""
        self._options = PositionOptions(
            enable_high_accuracy=config.enable_high_accuracy,
            timeout=config.timeout,
        )
        self._provider = provider
        self._adapter = ProviderVersionAdapter(config.provider_version)
        # older provider revisions need their settings seeded
        self._adapter.apply(provider)
        self._gate = PermissionGate(store, config.preference_key, self._revoke)
        _LOGGER.debug(
            "Geolocation initialized (revision %s, allowed %s)",
            self._adapter.revision,
            self._gate.allowed,
        )

    @callback
    def teardown(self, reason: str | None = None) -> None:
        """Stop watching; on disable also forget the permission."""
        self.stop_watching()
        if reason == TEARDOWN_REASON_DISABLE:
            self.allowed = False

    @property
    def initialized(self) -> bool:
        """Return True once initialize has been called."""
        return self._provider is not None

    @property
    def provider(self) -> LocationProvider:
        """Return the wrapped provider."""
        if self._provider is None:
            raise RuntimeError("Geolocation has not been initialized")
        return self._provider

    @property
    def revision(self) -> ProviderRevision:
        """Return the detected provider revision."""
        return self._require_adapter().revision

    @property
    def supports_address(self) -> bool:
        """Return True if the provider revision resolves addresses."""
        return self._require_adapter().supports_address

    @property
    def allowed(self) -> bool:
        """Return whether geolocation may be used."""
        return self._require_gate().allowed

    @allowed.setter
    def allowed(self, allow: bool) -> None:
        self._require_gate().allowed = allow

    @property
    def enable_high_accuracy(self) -> bool:
        """Return the high accuracy option used for the next acquisition."""
        return self._options.enable_high_accuracy

    @enable_high_accuracy.setter
    def enable_high_accuracy(self, enable_high_accuracy: bool) -> None:
        self._options = PositionOptions(
            enable_high_accuracy=enable_high_accuracy,
            timeout=self._options.timeout,
        )

    @property
    def timeout(self) -> int:
        """Return the acquisition timeout in milliseconds."""
        return self._options.timeout

    @timeout.setter
    def timeout(self, timeout: int) -> None:
        self._options = PositionOptions(
            enable_high_accuracy=self._options.enable_high_accuracy,
            timeout=timeout,
        )

    @property
    def options(self) -> PositionOptions:
        """Return the options the next acquisition will use."""
        return self._options

    @property
    def last_position(self) -> PositionSample | None:
        """Return the most recent sample reported by the provider."""
        return self.provider.last_position

    @property
    def position(self) -> PositionSample | None:
        """Return the most recently retrieved position."""
        return self._position

    @property
    def timestamp(self) -> datetime | None:
        """Return the timestamp of the last reading."""
        return self._position.timestamp if self._position else None

    @property
    def coords(self) -> Coordinates | None:
        """Return the most recently retrieved coordinates."""
        return self._position.coords if self._position else None

    @property
    def latitude(self) -> float | str:
        """Return the latitude or an empty string."""
        return self.coords.latitude if self.coords else ""

    @property
    def longitude(self) -> float | str:
        """Return the longitude or an empty string."""
        return self.coords.longitude if self.coords else ""

    @property
    def accuracy(self) -> float | None:
        """Return the accuracy of the latitude and longitude in meters."""
        return self.coords.accuracy if self.coords else None

    @property
    def altitude(self) -> float | None:
        return self.coords.altitude if self.coords else None

    @property
    def altitude_accuracy(self) -> float | None:
        return self.coords.altitude_accuracy if self.coords else None

    @property
    def heading(self) -> float | None:
        """Return degrees clockwise from true north.

        NaN when speed is 0, None when the provider cannot report it.
        """
        return self.coords.heading if self.coords else None

    @property
    def speed(self) -> float | None:
        """Return the velocity of the device in meters per second."""
        return self.coords.speed if self.coords else None

    @property
    def address(self) -> Address | None:
        """Return the address resolved by a legacy provider revision."""
        if not self.supports_address:
            return None
        return self._address

    @callback
    def get_current_position(self) -> asyncio.Future[PositionSample]:
        """Request a single position.

        The returned future resolves with the sample or rejects with a
        GeolocationError. The provider is not called unless allowed.
        """
        future: asyncio.Future[PositionSample] = asyncio.get_running_loop().create_future()

        if not self.allowed:
            _reject(future, self._publish_error(not_allowed_error()))
            return future

        @callback
        def _success(sample: PositionSample) -> None:
            _resolve(future, self._process_sample(sample))

        @callback
        def _failure(record: PositionErrorRecord) -> None:
            _reject(future, self._process_failure(record))

        self.provider.get_current_position(_success, _failure, self._options)
        return future

    @callback
    def watch_position(self) -> asyncio.Future[PositionSample | None]:
        """Start watching the position unless a watch is already running.

        The returned future resolves with the first reading of the watch, or
        right away with the cached position when already watching. Stopping
        the watch before its first reading resolves it with the cached
        position; revoking the permission rejects it with ``not-allowed``.
        """
        future: asyncio.Future[PositionSample | None] = (
            asyncio.get_running_loop().create_future()
        )

        if not self.allowed:
            self.stop_watching()
            _reject(future, self._publish_error(not_allowed_error()))
            return future

        if self.is_watching():
            future.set_result(self._position)
            return future

        token = object()

        @callback
        def _success(sample: PositionSample) -> None:
            if self._watch_token is not token:
                _LOGGER.debug("Ignoring position from a cleared watch")
                return
            _resolve(future, self._process_sample(sample))

        @callback
        def _failure(record: PositionErrorRecord) -> None:
            if self._watch_token is not token:
                _LOGGER.debug("Ignoring error from a cleared watch: %s", record)
                return
            _reject(future, self._process_failure(record))

        self._watch_token = token
        self._watch_future = future
        try:
            watch_id = self.provider.watch_position(_success, _failure, self._options)
        except GeowatchError as err:
            self._watch_token = None
            self._watch_future = None
            _LOGGER.debug("Provider refused watch registration: %s", err)
            _reject(future, err)
            return future

        # the provider may have been stopped from inside a callback
        if self._watch_token is token:
            self._watch_id = watch_id
            _LOGGER.debug("Watching position with watch id %s", watch_id)
        else:
            self.provider.clear_watch(watch_id)
        return future

    @callback
    def stop_watching(self) -> None:
        """Clear the provider watch, if any."""
        self._watch_token = None
        future, self._watch_future = self._watch_future, None
        if future is not None:
            _resolve(future, self._position)
        if self.is_watching():
            watch_id = self._watch_id
            self._watch_id = None
            self.provider.clear_watch(watch_id)
            _LOGGER.debug("Stopped watching position (watch id %s)", watch_id)

    def is_watching(self) -> bool:
        """Return True if a provider watch is registered."""
        return self._watch_id is not None

    @callback
    def _revoke(self) -> None:
        """Stop watching once the permission is withdrawn."""
        if self._watch_future is not None:
            _reject(self._watch_future, not_allowed_error())
        self.stop_watching()

    @callback
    def _process_sample(self, sample: PositionSample) -> PositionSample:
        """Cache a new sample and notify listeners.

        Samples are compared by identity; the same object delivered again
        is not a change.
        """
        if sample is self._position:
            return sample

        self._position = sample
        self.channels.coords.emit(sample.coords)

        if self.supports_address:
            self._address = sample.address
            if sample.address is not None:
                self.channels.address.emit(sample.address)

        return sample

    @callback
    def _process_failure(self, record: PositionErrorRecord) -> GeolocationError:
        return self._publish_error(classify_error(record, self.timeout))

    @callback
    def _publish_error(self, error: GeolocationError) -> GeolocationError:
        _LOGGER.debug("Geolocation error: %s", error.kind)
        self.channels.error.emit(error)
        return error

    def _require_gate(self) -> PermissionGate:
        if self._gate is None:
            raise RuntimeError("Geolocation has not been initialized")
        return self._gate

    def _require_adapter(self) -> ProviderVersionAdapter:
        if self._adapter is None:
            raise RuntimeError("Geolocation has not been initialized")
        return self._adapter


def _resolve(future: asyncio.Future, result: object) -> None:
    if not future.done():
        future.set_result(result)


def _reject(future: asyncio.Future, error: Exception) -> None:
    if not future.done():
        future.set_exception(error)
