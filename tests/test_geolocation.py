import math

import pytest

from custom_components.geowatch.const import DEFAULT_TIMEOUT, LEGACY_PROVIDER_SETTINGS
from custom_components.geowatch.errors import (
    ErrorKind,
    GeolocationError,
    PositionErrorCode,
    PositionErrorRecord,
    ProviderRegistrationError,
)
from custom_components.geowatch.revision import ProviderRevision
from tests.conftest import (
    PREFERENCE_KEY,
    FakeStore,
    Recorder,
    build_geolocation,
    make_sample,
)


def test_not_allowed_by_default(geolocation):
    assert geolocation.allowed is False
    assert geolocation.enable_high_accuracy is False
    assert geolocation.timeout == DEFAULT_TIMEOUT
    assert geolocation.is_watching() is False


def test_allowed_is_persisted(geolocation, store):
    geolocation.allowed = False
    assert store.data[PREFERENCE_KEY] is False
    geolocation.allowed = True
    assert store.data[PREFERENCE_KEY] is True
    assert geolocation.allowed is True
    assert store.writes == [(PREFERENCE_KEY, False), (PREFERENCE_KEY, True)]


def test_allowed_is_read_from_store(provider):
    geolocation = build_geolocation(provider, FakeStore({PREFERENCE_KEY: True}))
    assert geolocation.allowed is True


def test_accessors_without_position(geolocation):
    assert geolocation.position is None
    assert geolocation.timestamp is None
    assert geolocation.coords is None
    assert geolocation.latitude == ""
    assert geolocation.longitude == ""
    assert geolocation.accuracy is None
    assert geolocation.altitude is None
    assert geolocation.altitude_accuracy is None
    assert geolocation.heading is None
    assert geolocation.speed is None
    assert geolocation.address is None


async def test_get_current_position_not_allowed(geolocation, provider, recorder):
    future = geolocation.get_current_position()

    assert future.done()
    with pytest.raises(GeolocationError) as exc_info:
        await future
    assert exc_info.value.kind is ErrorKind.NOT_ALLOWED
    assert provider.requests == []
    assert [error.kind for error in recorder.of("error")] == [ErrorKind.NOT_ALLOWED]


async def test_get_current_position(geolocation, provider, recorder):
    geolocation.allowed = True
    future = geolocation.get_current_position()
    assert not future.done()

    sample = make_sample(altitude=550.0, altitude_accuracy=3.0, heading=math.nan, speed=0.0)
    provider.respond(sample)

    assert await future is sample
    assert geolocation.position is sample
    assert geolocation.last_position is sample
    assert geolocation.latitude == 10.0
    assert geolocation.longitude == 20.0
    assert geolocation.accuracy == 25.0
    assert geolocation.altitude == 550.0
    assert geolocation.altitude_accuracy == 3.0
    assert math.isnan(geolocation.heading)
    assert geolocation.speed == 0.0
    assert geolocation.timestamp == sample.timestamp
    assert recorder.of("coords") == [sample.coords]
    assert recorder.of("error") == []


async def test_timeout_error_carries_configured_timeout(geolocation, provider, recorder):
    geolocation.allowed = True
    geolocation.timeout = 5000
    future = geolocation.get_current_position()

    provider.fail(PositionErrorRecord(PositionErrorCode.TIMEOUT, "too slow"))

    with pytest.raises(GeolocationError) as exc_info:
        await future
    assert exc_info.value.kind is ErrorKind.TIMEOUT
    assert exc_info.value.timeout == 5000
    [error] = recorder.of("error")
    assert error.kind is ErrorKind.TIMEOUT
    assert error.timeout == 5000


@pytest.mark.parametrize(
    ("code", "kind"),
    [
        (PositionErrorCode.PERMISSION_DENIED, ErrorKind.PERMISSION_DENIED),
        (PositionErrorCode.POSITION_UNAVAILABLE, ErrorKind.POSITION_UNAVAILABLE),
        (42, ErrorKind.POSITION_UNAVAILABLE),
    ],
)
async def test_provider_errors_are_classified(geolocation, provider, recorder, code, kind):
    geolocation.allowed = True
    future = geolocation.get_current_position()

    provider.fail(PositionErrorRecord(code, "failed"))

    with pytest.raises(GeolocationError) as exc_info:
        await future
    assert exc_info.value.kind is kind
    assert exc_info.value.timeout is None
    assert [error.kind for error in recorder.of("error")] == [kind]


async def test_option_changes_apply_to_next_call(geolocation, provider):
    geolocation.allowed = True
    first = geolocation.get_current_position()

    geolocation.enable_high_accuracy = True
    geolocation.timeout = 1000
    second = geolocation.get_current_position()

    first_options = provider.requests[0][2]
    second_options = provider.requests[1][2]
    assert first_options.enable_high_accuracy is False
    assert first_options.timeout == DEFAULT_TIMEOUT
    assert second_options.enable_high_accuracy is True
    assert second_options.timeout == 1000

    provider.respond(make_sample())
    provider.respond(make_sample())
    await first
    await second


async def test_identical_values_in_distinct_samples_notify_twice(
    geolocation, provider, recorder
):
    geolocation.allowed = True
    first = geolocation.get_current_position()
    second = geolocation.get_current_position()

    sample_a = make_sample(10, 20)
    sample_b = make_sample(10, 20)
    provider.respond(sample_a)
    provider.respond(sample_b)

    assert await first is sample_a
    assert await second is sample_b
    assert len(recorder.of("coords")) == 2
    assert geolocation.position is sample_b


async def test_same_sample_object_does_not_notify_again(geolocation, provider, recorder):
    geolocation.allowed = True
    first = geolocation.get_current_position()
    second = geolocation.get_current_position()

    sample = make_sample()
    provider.respond(sample)
    provider.respond(sample)

    assert await first is sample
    # the second call still completes with the sample
    assert await second is sample
    assert len(recorder.of("coords")) == 1


async def test_watch_position(geolocation, provider, recorder):
    geolocation.allowed = True
    future = geolocation.watch_position()

    assert geolocation.is_watching()
    assert provider.registrations == 1

    success, _, _ = provider.watches[1]
    first = make_sample(1, 1)
    success(first)
    success(make_sample(2, 2))

    assert await future is first
    assert [coords.latitude for coords in recorder.of("coords")] == [1, 2]


async def test_watch_twice_does_not_register_again(geolocation, provider, recorder):
    geolocation.allowed = True
    geolocation.watch_position()
    success, _, _ = provider.watches[1]
    cached = make_sample()
    success(cached)

    second = geolocation.watch_position()

    assert second.done()
    assert await second is cached
    assert provider.registrations == 1
    assert len(recorder.of("coords")) == 1


async def test_watch_when_already_watching_without_position(geolocation, provider):
    geolocation.allowed = True
    geolocation.watch_position()

    assert await geolocation.watch_position() is None
    assert provider.registrations == 1


async def test_watch_error_is_classified(geolocation, provider, recorder):
    geolocation.allowed = True
    future = geolocation.watch_position()
    _, failure, _ = provider.watches[1]

    failure(PositionErrorRecord(PositionErrorCode.POSITION_UNAVAILABLE))

    with pytest.raises(GeolocationError):
        await future
    assert [error.kind for error in recorder.of("error")] == [
        ErrorKind.POSITION_UNAVAILABLE
    ]
    # watching continues until stopped
    assert geolocation.is_watching()


async def test_revoking_permission_stops_watch(geolocation, provider, recorder):
    geolocation.allowed = True
    future = geolocation.watch_position()
    success, failure, _ = provider.watches[1]

    geolocation.allowed = False

    assert geolocation.is_watching() is False
    assert provider.cleared == [1]

    # late callbacks from the cleared watch are ignored
    success(make_sample())
    failure(PositionErrorRecord(PositionErrorCode.TIMEOUT))
    assert recorder.events == []
    assert geolocation.position is None

    with pytest.raises(GeolocationError) as exc_info:
        await future
    assert exc_info.value.kind is ErrorKind.NOT_ALLOWED


async def test_stop_before_first_reading_settles_watch(geolocation, provider):
    geolocation.allowed = True
    future = geolocation.watch_position()

    geolocation.stop_watching()

    assert future.done()
    assert await future is None


async def test_stop_before_first_reading_returns_cached_position(geolocation, provider):
    geolocation.allowed = True
    one_shot = geolocation.get_current_position()
    cached = make_sample()
    provider.respond(cached)
    await one_shot

    future = geolocation.watch_position()
    geolocation.stop_watching()

    assert await future is cached


async def test_stop_watching_is_idempotent(geolocation, provider):
    geolocation.stop_watching()
    assert provider.cleared == []

    geolocation.allowed = True
    geolocation.watch_position()
    geolocation.stop_watching()
    geolocation.stop_watching()

    assert provider.cleared == [1]
    assert geolocation.is_watching() is False


async def test_watch_not_allowed(geolocation, provider, recorder):
    future = geolocation.watch_position()

    with pytest.raises(GeolocationError) as exc_info:
        await future
    assert exc_info.value.kind is ErrorKind.NOT_ALLOWED
    assert provider.registrations == 0
    assert [error.kind for error in recorder.of("error")] == [ErrorKind.NOT_ALLOWED]


async def test_watch_registration_failure(geolocation, provider, recorder):
    geolocation.allowed = True
    provider.refuse_watch = True

    with pytest.raises(ProviderRegistrationError):
        await geolocation.watch_position()
    assert geolocation.is_watching() is False
    assert recorder.events == []

    provider.refuse_watch = False
    geolocation.watch_position()
    assert geolocation.is_watching()


async def test_teardown_stops_watching(geolocation, provider, store):
    geolocation.allowed = True
    geolocation.watch_position()

    geolocation.teardown()

    assert geolocation.is_watching() is False
    assert geolocation.allowed is True
    assert store.data[PREFERENCE_KEY] is True


async def test_teardown_on_disable_revokes_permission(geolocation, provider, store):
    geolocation.allowed = True
    geolocation.watch_position()

    geolocation.teardown("disable")

    assert geolocation.is_watching() is False
    assert geolocation.allowed is False
    assert store.data[PREFERENCE_KEY] is False


def test_modern_revision_skips_compat_settings(geolocation, provider):
    assert geolocation.revision is ProviderRevision.MODERN
    assert geolocation.supports_address is False
    assert provider.settings == {}


def test_legacy_revision_applies_compat_settings(provider, store):
    provider.settings["wifi_uri"] = "https://locate.example.com"

    geolocation = build_geolocation(provider, store, provider_version="1.1.0")

    assert geolocation.revision is ProviderRevision.LEGACY
    assert geolocation.supports_address is True
    assert provider.settings == {
        "wifi_protocol": LEGACY_PROVIDER_SETTINGS["wifi_protocol"],
        "wifi_uri": "https://locate.example.com",
    }


async def test_legacy_revision_emits_address_after_coords(legacy_geolocation, provider):
    recorder = Recorder(legacy_geolocation)
    legacy_geolocation.allowed = True
    future = legacy_geolocation.get_current_position()

    address = {"city": "Mountain View", "country": "United States"}
    provider.respond(make_sample(address=address))
    await future

    assert [kind for kind, _ in recorder.events] == ["coords", "address"]
    assert recorder.of("address") == [address]
    assert legacy_geolocation.address == address


async def test_modern_revision_never_exposes_address(geolocation, provider, recorder):
    geolocation.allowed = True
    future = geolocation.get_current_position()

    provider.respond(make_sample(address={"city": "Mountain View"}))
    await future

    assert geolocation.address is None
    assert recorder.of("address") == []
