"""Errors and provider error classification for Geowatch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum
import logging

_LOGGER = logging.getLogger(__name__)


class ErrorKind(StrEnum):
    """Closed set of failures surfaced to callers and listeners."""

    NOT_ALLOWED = "not-allowed"
    PERMISSION_DENIED = "permission-denied"
    POSITION_UNAVAILABLE = "position-unavailable"
    TIMEOUT = "timeout"


class PositionErrorCode(IntEnum):
    """Codes reported by the location provider."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


@dataclass(frozen=True)
class PositionErrorRecord:
    """A failure reported by the location provider."""

    code: int
    message: str = ""


class GeowatchError(Exception):
    """Base error for the Geowatch integration."""


class GeolocationError(GeowatchError):
    """A classified position acquisition failure."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str = "",
        *,
        timeout: int | None = None,
        record: PositionErrorRecord | None = None,
    ) -> None:
        """Initialize the error."""
        super().__init__(message or kind.value)
        self.kind = kind
        self.timeout = timeout
        self.record = record


class ProviderRegistrationError(GeowatchError):
    """The provider refused to register a position watch."""


_CODE_TO_KIND = {
    PositionErrorCode.PERMISSION_DENIED: ErrorKind.PERMISSION_DENIED,
    PositionErrorCode.POSITION_UNAVAILABLE: ErrorKind.POSITION_UNAVAILABLE,
    PositionErrorCode.TIMEOUT: ErrorKind.TIMEOUT,
}


def classify_error(record: PositionErrorRecord, timeout: int) -> GeolocationError:
    """Map a provider error record onto the error taxonomy.

    ``timeout`` is the currently configured acquisition timeout and is only
    attached to timeout errors.
    """
    kind = _CODE_TO_KIND.get(record.code)
    if kind is None:
        _LOGGER.warning(
            "Unknown provider error code %s (%s), treating as unavailable",
            record.code,
            record.message,
        )
        kind = ErrorKind.POSITION_UNAVAILABLE

    return GeolocationError(
        kind,
        record.message,
        timeout=timeout if kind is ErrorKind.TIMEOUT else None,
        record=record,
    )


def not_allowed_error() -> GeolocationError:
    """Return the error raised locally when geolocation is not allowed."""
    return GeolocationError(
        ErrorKind.NOT_ALLOWED,
        "You must get permission to use geolocation and set allowed to true",
    )
