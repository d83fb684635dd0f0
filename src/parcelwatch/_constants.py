"""Internal constants shared across the package."""

TRACKING_URL = "https://parcelsapp.com/api/v3/shipments/tracking"
USER_AGENT = "parcelwatch"

#: Display value for any field the provider did not (yet) report.
NO_DATA = "No data"

DEFAULT_INTERVAL_MS = 300_000
MIN_INTERVAL_MS = 30_000

#: The tray is killed this long before the next tick.
KILL_MARGIN_MS = 500

#: Number of event lines shown in the tray menu.
MAX_EVENTS = 10

DEFAULT_REQUEST_TIMEOUT = 30.0

TRACKING_FILE = "tracking.json"
LAST_STATE_FILE = "laststate.json"

#: Module name of the tray child process, also used to find stale ones.
TRAY_HOST_MODULE = "parcelwatch.tray.host"

STATE_CHANGED_TITLE = "State changed!"
COPY_TITLE = "Tracking number"
COPY_MESSAGE = "Copied tracking number into clipboard"

_PLACEHOLDER_KEYS = frozenset({"", "changeme", "change_me", "xxx", "none", "null"})


def is_placeholder_key(value: str | None) -> bool:
    """Return ``True`` for empty or obviously unset API key values."""
    if value is None:
        return True
    normalized = value.strip().lower()
    if normalized in _PLACEHOLDER_KEYS:
        return True
    return normalized.startswith(("your", "<"))
