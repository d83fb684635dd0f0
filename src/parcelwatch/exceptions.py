"""Custom exception hierarchy for parcelwatch."""

from __future__ import annotations


class ParcelwatchError(Exception):
    """Base exception for all parcelwatch errors."""


class ConfigError(ParcelwatchError):
    """Invalid or missing configuration (fatal at startup)."""


class StateStoreError(ParcelwatchError):
    """Persisted last-state file could not be read or written."""


class TrackingError(ParcelwatchError):
    """A tracking request failed; the current cycle is aborted."""


class TrackingTransportError(TrackingError):
    """HTTP-level failure (network, timeout, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class TrackingApiError(TrackingError):
    """The tracking provider answered with an explicit error."""

    def __init__(self, message: str, *, error: str = "") -> None:
        self.error = error
        super().__init__(message)


class PlatformError(ParcelwatchError):
    """A platform helper (clipboard, process control) is unavailable or failed."""
