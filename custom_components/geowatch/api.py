"""Geolocation web service client."""

from __future__ import annotations

import asyncio
from collections.abc import MutableMapping
from datetime import timedelta
import logging
import math
from typing import Any

import aiohttp
from homeassistant.util import dt as dt_util

from .const import DEFAULT_WATCH_INTERVAL, LEGACY_REQUEST_VERSION
from .errors import (
    GeowatchError,
    PositionErrorCode,
    PositionErrorRecord,
    ProviderRegistrationError,
)
from .models import Coordinates, PositionOptions, PositionSample
from .provider import FailureCallback, SuccessCallback

_LOGGER = logging.getLogger(__name__)

REQUIRED_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

# provider setting selecting the legacy address resolving protocol
SETTING_WIFI_PROTOCOL = "wifi_protocol"
SETTING_WIFI_URI = "wifi_uri"
LEGACY_WIFI_PROTOCOL = 0


class GeowatchApiError(GeowatchError):
    """General geolocation service error."""


class GeowatchAuthError(GeowatchApiError):
    """The service refused the request."""


class GeowatchTimeoutError(GeowatchApiError):
    """The service did not answer in time."""


class GeowatchApiClient:
    """Location provider backed by a JSON geolocation web service."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        url: str,
        api_key: str | None = None,
        watch_interval: timedelta = DEFAULT_WATCH_INTERVAL,
    ) -> None:
        """Initialize the API client."""
        self._session = session
        self._url = url
        self._api_key = api_key
        self.watch_interval = watch_interval
        self.settings: MutableMapping[str, Any] = {}
        self._last_position: PositionSample | None = None
        self._watches: dict[int, asyncio.Task[None]] = {}
        self._pending: set[asyncio.Task[None]] = set()
        self._next_watch_id = 1

    @property
    def last_position(self) -> PositionSample | None:
        """Return the most recent sample the service produced."""
        return self._last_position

    @property
    def legacy_protocol(self) -> bool:
        """Return True if requests use the address resolving protocol."""
        return self.settings.get(SETTING_WIFI_PROTOCOL) == LEGACY_WIFI_PROTOCOL

    def get_current_position(
        self,
        success: SuccessCallback,
        failure: FailureCallback,
        options: PositionOptions,
    ) -> None:
        """Request one position, reporting it through a callback."""
        task = asyncio.get_running_loop().create_task(
            self._async_locate_once(success, failure, options)
        )
        self._pending.add(task)

        def _done(task: asyncio.Task[None]) -> None:
            self._pending.discard(task)
            # closed before the service answered
            if task.cancelled():
                failure(
                    PositionErrorRecord(
                        PositionErrorCode.POSITION_UNAVAILABLE, "Request cancelled"
                    )
                )

        task.add_done_callback(_done)

    def watch_position(
        self,
        success: SuccessCallback,
        failure: FailureCallback,
        options: PositionOptions,
    ) -> int:
        """Start polling the service, returning the watch id."""
        if options.timeout <= 0:
            raise ProviderRegistrationError(
                f"Timeout must be positive, got {options.timeout}"
            )
        if self.watch_interval.total_seconds() <= 0:
            raise ProviderRegistrationError(
                f"Watch interval must be positive, got {self.watch_interval}"
            )

        watch_id = self._next_watch_id
        self._next_watch_id += 1
        self._watches[watch_id] = asyncio.get_running_loop().create_task(
            self._async_watch(success, failure, options)
        )
        return watch_id

    def clear_watch(self, watch_id: int) -> None:
        """Cancel a running watch."""
        if (task := self._watches.pop(watch_id, None)) is not None:
            task.cancel()

    def close(self) -> None:
        """Cancel every outstanding request and watch."""
        for watch_id in list(self._watches):
            self.clear_watch(watch_id)
        for task in list(self._pending):
            task.cancel()

    async def _async_locate_once(
        self,
        success: SuccessCallback,
        failure: FailureCallback,
        options: PositionOptions,
    ) -> None:
        try:
            sample = await self.async_locate(options)
        except GeowatchApiError as err:
            failure(error_record_from_exception(err))
        else:
            success(sample)

    async def _async_watch(
        self,
        success: SuccessCallback,
        failure: FailureCallback,
        options: PositionOptions,
    ) -> None:
        interval = self.watch_interval.total_seconds()
        while True:
            try:
                sample = await self.async_locate(options)
            except GeowatchApiError as err:
                failure(error_record_from_exception(err))
            else:
                success(sample)
            await asyncio.sleep(interval)

    async def async_locate(self, options: PositionOptions) -> PositionSample:
        """Fetch the current position from the service."""
        if self.legacy_protocol:
            url = self.settings.get(SETTING_WIFI_URI, self._url)
            body: dict[str, Any] = {
                "version": LEGACY_REQUEST_VERSION,
                "request_address": True,
            }
        else:
            url = self._url
            body = {"considerIp": not options.enable_high_accuracy}

        params = {"key": self._api_key} if self._api_key else None

        try:
            async with asyncio.timeout(options.timeout / 1000):
                resp = await self._session.post(
                    url, params=params, json=body, headers=REQUIRED_HEADERS
                )
                if resp.status in (401, 403):
                    raise GeowatchAuthError(
                        f"Geolocation service refused request (HTTP {resp.status})"
                    )
                if resp.status != 200:
                    raise GeowatchApiError(
                        f"Geolocation service returned HTTP {resp.status}"
                    )
                data = await resp.json(content_type=None)
        except TimeoutError as err:
            raise GeowatchTimeoutError(
                f"Geolocation service did not answer within {options.timeout} ms"
            ) from err
        except aiohttp.ClientError as err:
            raise GeowatchApiError(f"Error communicating with geolocation service: {err}") from err
        except ValueError as err:
            raise GeowatchApiError(f"Invalid JSON from geolocation service: {err}") from err

        if not data or not isinstance(data, dict):
            raise GeowatchApiError("Geolocation service returned empty response")

        if self.legacy_protocol:
            sample = parse_legacy_response(data)
        else:
            sample = parse_response(data)
        if sample is None:
            raise GeowatchApiError("Geolocation service returned no location")

        self._last_position = sample
        return sample


def error_record_from_exception(err: GeowatchApiError) -> PositionErrorRecord:
    """Translate a client exception into a provider error record."""
    if isinstance(err, GeowatchAuthError):
        code = PositionErrorCode.PERMISSION_DENIED
    elif isinstance(err, GeowatchTimeoutError):
        code = PositionErrorCode.TIMEOUT
    else:
        code = PositionErrorCode.POSITION_UNAVAILABLE
    return PositionErrorRecord(code=code, message=str(err))


def _optional_float(entry: dict[str, Any], key: str) -> float | None:
    raw = entry.get(key)
    if raw in (None, "", "-"):
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        _LOGGER.debug("Failed to parse %s: %s", key, raw)
        return None


def _heading(entry: dict[str, Any], speed: float | None) -> float | None:
    heading = _optional_float(entry, "heading")
    if heading is not None and speed == 0:
        return math.nan
    return heading


def parse_response(data: dict[str, Any]) -> PositionSample | None:
    """Parse a modern service response.

    Expected shape: ``{"location": {"lat": .., "lng": ..}, "accuracy": ..}``.
    """
    location = data.get("location")
    if not isinstance(location, dict):
        _LOGGER.warning("No location in geolocation response")
        return None

    try:
        latitude = float(location["lat"])
        longitude = float(location["lng"])
        accuracy = float(data["accuracy"])
    except (KeyError, ValueError, TypeError) as err:
        _LOGGER.warning("Failed to parse coordinates: %s", err)
        return None

    speed = _optional_float(data, "speed")
    return PositionSample(
        timestamp=dt_util.utcnow(),
        coords=Coordinates(
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            altitude=_optional_float(data, "altitude"),
            altitude_accuracy=_optional_float(data, "altitudeAccuracy"),
            heading=_heading(data, speed),
            speed=speed,
        ),
    )


def parse_legacy_response(data: dict[str, Any]) -> PositionSample | None:
    """Parse a legacy (version 1.1.0) response carrying an address.

    Expected shape: ``{"location": {"latitude": .., "longitude": ..,
    "accuracy": .., "address": {..}}}``.
    """
    location = data.get("location")
    if not isinstance(location, dict):
        _LOGGER.warning("No location in legacy geolocation response")
        return None

    try:
        latitude = float(location["latitude"])
        longitude = float(location["longitude"])
        accuracy = float(location["accuracy"])
    except (KeyError, ValueError, TypeError) as err:
        _LOGGER.warning("Failed to parse legacy coordinates: %s", err)
        return None

    address = location.get("address")
    if isinstance(address, dict):
        address = {str(key): str(value) for key, value in address.items()}
    else:
        address = None

    speed = _optional_float(location, "speed")
    return PositionSample(
        timestamp=dt_util.utcnow(),
        coords=Coordinates(
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            altitude=_optional_float(location, "altitude"),
            altitude_accuracy=_optional_float(location, "altitude_accuracy"),
            heading=_heading(location, speed),
            speed=speed,
        ),
        address=address,
    )
