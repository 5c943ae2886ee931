"""Fixtures for Geowatch tests."""

from datetime import datetime, timezone

import pytest

from custom_components.geowatch.errors import ProviderRegistrationError
from custom_components.geowatch.geolocation import Geolocation
from custom_components.geowatch.models import (
    Coordinates,
    GeolocationConfig,
    PositionSample,
)

PREFERENCE_KEY = "geowatch.test.allow_geolocation"


class FakeStore:
    def __init__(self, data=None):
        self.data = dict(data or {})
        self.writes = []

    def get(self, key, default=None):
        return self.data.get(key, default)

    def set(self, key, value):
        self.data[key] = value
        self.writes.append((key, value))


class FakeProvider:
    """Provider whose callbacks are driven by the test."""

    def __init__(self):
        self.settings = {}
        self.last_position = None
        self.requests = []
        self.watches = {}
        self.registrations = 0
        self.cleared = []
        self.refuse_watch = False
        self._next_id = 1

    def get_current_position(self, success, failure, options):
        self.requests.append((success, failure, options))

    def watch_position(self, success, failure, options):
        if self.refuse_watch:
            raise ProviderRegistrationError("options rejected")
        self.registrations += 1
        watch_id = self._next_id
        self._next_id += 1
        self.watches[watch_id] = (success, failure, options)
        return watch_id

    def clear_watch(self, watch_id):
        self.cleared.append(watch_id)
        self.watches.pop(watch_id, None)

    def respond(self, sample):
        """Answer the oldest one-shot request with a sample."""
        success, _, _ = self.requests.pop(0)
        self.last_position = sample
        success(sample)

    def fail(self, record):
        """Answer the oldest one-shot request with an error."""
        _, failure, _ = self.requests.pop(0)
        failure(record)


def make_sample(latitude=10.0, longitude=20.0, address=None, **coords):
    return PositionSample(
        timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        coords=Coordinates(
            latitude=latitude,
            longitude=longitude,
            accuracy=coords.pop("accuracy", 25.0),
            **coords,
        ),
        address=address,
    )


class Recorder:
    """Collect notifications from every channel in delivery order."""

    def __init__(self, geolocation):
        self.events = []
        channels = geolocation.channels
        channels.coords.async_subscribe(lambda payload: self.events.append(("coords", payload)))
        channels.address.async_subscribe(lambda payload: self.events.append(("address", payload)))
        channels.error.async_subscribe(lambda payload: self.events.append(("error", payload)))

    def of(self, name):
        return [payload for kind, payload in self.events if kind == name]


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def provider():
    return FakeProvider()


def build_geolocation(provider, store, **config):
    geolocation = Geolocation()
    geolocation.initialize(
        GeolocationConfig(preference_key=PREFERENCE_KEY, **config), provider, store
    )
    return geolocation


@pytest.fixture
def geolocation(provider, store):
    return build_geolocation(provider, store)


@pytest.fixture
def legacy_geolocation(provider, store):
    return build_geolocation(provider, store, provider_version="1.1.0")


@pytest.fixture
def recorder(geolocation):
    return Recorder(geolocation)
