"""parcelwatch - Watch a single shipment from the desktop tray."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("parcelwatch")
except PackageNotFoundError:
    __version__ = "0+local"
from parcelwatch.client import TrackingClient
from parcelwatch.config import MonitorConfig, TrackingConfig, TrackingConfigFile, resolve_interval
from parcelwatch.exceptions import (
    ConfigError,
    ParcelwatchError,
    PlatformError,
    StateStoreError,
    TrackingApiError,
    TrackingError,
    TrackingTransportError,
)
from parcelwatch.models import Event, FetchResult, Pending, Place, Ready, ShipmentSnapshot
from parcelwatch.monitor import CycleOutcome, Monitor
from parcelwatch.state import Changed, LastState, StateStore, Unchanged, detect

__all__ = [
    "__version__",
    "Changed",
    "ConfigError",
    "CycleOutcome",
    "Event",
    "FetchResult",
    "LastState",
    "Monitor",
    "MonitorConfig",
    "ParcelwatchError",
    "Pending",
    "Place",
    "PlatformError",
    "Ready",
    "ShipmentSnapshot",
    "StateStore",
    "StateStoreError",
    "TrackingApiError",
    "TrackingClient",
    "TrackingConfig",
    "TrackingConfigFile",
    "TrackingError",
    "TrackingTransportError",
    "Unchanged",
    "detect",
    "resolve_interval",
]
