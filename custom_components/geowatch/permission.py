"""Persisted permission gate for geolocation access."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any, Protocol

_LOGGER = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    """Key-value store used to remember preferences across restarts."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return a stored value."""

    def set(self, key: str, value: Any) -> None:
        """Store a value."""


class PermissionGate:
    """Own the allowed flag and keep it in sync with the preference store.

    It is the caller's responsibility to actually ask the user before
    setting ``allowed`` to True.
    """

    def __init__(
        self,
        store: PreferenceStore,
        key: str,
        on_revoke: Callable[[], None],
    ) -> None:
        """Initialize the gate from the persisted value."""
        self._store = store
        self._key = key
        self._on_revoke = on_revoke
        self._allowed = bool(store.get(key, False))

    @property
    def key(self) -> str:
        """Return the preference key."""
        return self._key

    @property
    def allowed(self) -> bool:
        """Return whether geolocation may be used."""
        return self._allowed

    @allowed.setter
    def allowed(self, allow: bool) -> None:
        self._allowed = allow
        self._store.set(self._key, allow)
        _LOGGER.debug("Geolocation allowed set to %s (%s)", allow, self._key)
        # no longer allowed, stop any running watch
        if not allow:
            self._on_revoke()
