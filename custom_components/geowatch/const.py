"""Constants for the Geowatch integration."""

from datetime import timedelta

DOMAIN = "geowatch"

DEFAULT_URL = "https://www.googleapis.com/geolocation/v1/geolocate"
DEFAULT_NAME = "Geowatch"

CONF_API_KEY = "api_key"
CONF_PROVIDER_VERSION = "provider_version"
CONF_ENABLE_HIGH_ACCURACY = "enable_high_accuracy"
CONF_TIMEOUT = "timeout"
CONF_WATCH = "watch"
CONF_WATCH_INTERVAL = "watch_interval"
CONF_CONFIG_ENTRY_ID = "config_entry_id"
CONF_ALLOWED = "allowed"

DEFAULT_ENABLE_HIGH_ACCURACY = False
# milliseconds
DEFAULT_TIMEOUT = 15 * 1000
DEFAULT_PROVIDER_VERSION = "2"
DEFAULT_WATCH_INTERVAL = timedelta(seconds=60)

# Provider revisions whose major version falls in this range resolve addresses
LEGACY_VERSION_RANGE = (1, 1)

LEGACY_PROVIDER_SETTINGS = {
    "wifi_protocol": 0,
    "wifi_uri": "https://www.google.com/loc/json",
}
LEGACY_REQUEST_VERSION = "1.1.0"

PREFERENCE_KEY_TEMPLATE = "geowatch.{}.allow_geolocation"

STORAGE_KEY = f"{DOMAIN}.preferences"
STORAGE_VERSION = 1
STORAGE_SAVE_DELAY = 1

ATTR_ALTITUDE = "altitude"
ATTR_ALTITUDE_ACCURACY = "altitude_accuracy"
ATTR_HEADING = "heading"
ATTR_SPEED = "speed"
ATTR_TIMESTAMP = "timestamp"
ATTR_ADDRESS = "address"
ATTR_ERROR = "error"
ATTR_TIMEOUT = "timeout"

EVENT_POSITION_ERROR = "geowatch_position_error"

SERVICE_SET_ALLOWED = "set_allowed"
SERVICE_GET_CURRENT_POSITION = "get_current_position"
SERVICE_WATCH_POSITION = "watch_position"
SERVICE_STOP_WATCHING = "stop_watching"

TEARDOWN_REASON_DISABLE = "disable"
