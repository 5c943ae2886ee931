"""Provider revision detection and compatibility defaults."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Any

from .const import LEGACY_PROVIDER_SETTINGS, LEGACY_VERSION_RANGE
from .provider import LocationProvider

_LOGGER = logging.getLogger(__name__)


class ProviderRevision(StrEnum):
    """Known location provider revisions."""

    LEGACY = "legacy"
    MODERN = "modern"


@dataclass(frozen=True)
class ProviderCapabilities:
    """What the active provider revision can do."""

    revision: ProviderRevision
    supports_address: bool
    compat_settings: Mapping[str, Any] = field(default_factory=dict)


LEGACY_CAPABILITIES = ProviderCapabilities(
    revision=ProviderRevision.LEGACY,
    supports_address=True,
    compat_settings=LEGACY_PROVIDER_SETTINGS,
)
MODERN_CAPABILITIES = ProviderCapabilities(
    revision=ProviderRevision.MODERN,
    supports_address=False,
)


def detect_revision(version: str) -> ProviderRevision:
    """Return the provider revision for a version string such as ``1.1.0``."""
    major_text = str(version).strip().lower().lstrip("v").split(".", 1)[0]
    try:
        major = int(major_text)
    except ValueError:
        _LOGGER.warning(
            "Unable to parse provider version %r, assuming modern revision", version
        )
        return ProviderRevision.MODERN

    low, high = LEGACY_VERSION_RANGE
    if low <= major <= high:
        return ProviderRevision.LEGACY
    return ProviderRevision.MODERN


class ProviderVersionAdapter:
    """Resolve provider capabilities once and apply compatibility defaults."""

    def __init__(self, version: str) -> None:
        """Initialize the adapter for the given provider version."""
        self.version = version
        if detect_revision(version) is ProviderRevision.LEGACY:
            self.capabilities = LEGACY_CAPABILITIES
        else:
            self.capabilities = MODERN_CAPABILITIES

    @property
    def revision(self) -> ProviderRevision:
        """Return the detected revision."""
        return self.capabilities.revision

    @property
    def supports_address(self) -> bool:
        """Return True if samples carry a resolved address."""
        return self.capabilities.supports_address

    def apply(self, provider: LocationProvider) -> None:
        """Set compatibility defaults the provider has not explicitly set."""
        for key, value in self.capabilities.compat_settings.items():
            if key in provider.settings:
                continue
            _LOGGER.debug("Applying %s provider default %s=%s", self.revision, key, value)
            provider.settings[key] = value
