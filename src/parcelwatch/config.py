"""Monitor configuration and the persisted tracking file."""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from parcelwatch._constants import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_REQUEST_TIMEOUT,
    KILL_MARGIN_MS,
    LAST_STATE_FILE,
    MIN_INTERVAL_MS,
    TRACKING_FILE,
    TRACKING_URL,
    is_placeholder_key,
)
from parcelwatch._files import read_json, write_json_atomic
from parcelwatch.exceptions import ConfigError

_logger = logging.getLogger(__name__)


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def default_data_dir() -> Path:
    return Path.home() / ".parcelwatch"


def resolve_interval(raw: Any) -> int:
    """Return the poll interval in ms for a user supplied value.

    Values that are not integers ``>= 30000`` fall back to the default
    of 300000 ms.
    """
    if isinstance(raw, bool):
        raw = None
    candidate: int | None = None
    if isinstance(raw, int):
        candidate = raw
    elif isinstance(raw, str) and raw.strip():
        try:
            candidate = int(raw.strip())
        except ValueError:
            candidate = None

    if candidate is not None and candidate >= MIN_INTERVAL_MS:
        return candidate

    _logger.warning("Got empty or invalid update interval (%r), falling back to default.", raw)
    return DEFAULT_INTERVAL_MS


@dataclasses.dataclass(frozen=True)
class MonitorConfig:
    """Monitor configuration.

    Parameters
    ----------
    api_key : str
        Tracking provider API key.
    tracking_url : str
        Endpoint that accepts the shipment tracking ``POST``.
    language : str
        Language requested for event descriptions.
    data_dir : Path
        Directory holding ``tracking.json``, ``laststate.json`` and the logs.
    poll_interval_ms : int
        Time between two cycles. Always ``>= 30000``.
    kill_margin_ms : int
        How long before the next tick the current tray is killed.
    request_timeout : float
        Total timeout for one tracking request, in seconds.
    pending_retries : int
        How many times a request is re-issued when the provider only
        acknowledges it instead of returning shipment data.
    mute_notifications : bool
        Ask the notification sink to stay silent.
    """

    api_key: str
    tracking_url: str = TRACKING_URL
    language: str = "en"
    data_dir: Path = dataclasses.field(default_factory=default_data_dir)
    poll_interval_ms: int = DEFAULT_INTERVAL_MS
    kill_margin_ms: int = KILL_MARGIN_MS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    pending_retries: int = 1
    mute_notifications: bool = False

    @property
    def tracking_file(self) -> Path:
        return self.data_dir / TRACKING_FILE

    @property
    def last_state_file(self) -> Path:
        return self.data_dir / LAST_STATE_FILE

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0

    @property
    def kill_delay(self) -> float:
        """Seconds after a render at which the tray is retired."""
        return max(self.poll_interval_ms - self.kill_margin_ms, 0) / 1000.0

    def validate(self) -> MonitorConfig:
        """Raise :class:`ConfigError` for settings the monitor cannot start with."""
        if is_placeholder_key(self.api_key):
            raise ConfigError("PARCELSAPP_API_KEY is empty or still a placeholder")
        if self.poll_interval_ms < MIN_INTERVAL_MS:
            raise ConfigError(f"poll interval must be >= {MIN_INTERVAL_MS} ms, got {self.poll_interval_ms}")
        if self.request_timeout <= 0:
            raise ConfigError(f"request timeout must be positive, got {self.request_timeout}")
        if self.pending_retries < 0:
            raise ConfigError(f"pending retries must be >= 0, got {self.pending_retries}")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> MonitorConfig:
        """Create configuration from environment variables.

        Reads ``PARCELSAPP_API_KEY`` and the optional ``PARCELWATCH_*``
        variables. Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {"api_key": env.get("PARCELSAPP_API_KEY", "")}

        home = env.get("PARCELWATCH_HOME")
        if home:
            config_kwargs["data_dir"] = Path(home).expanduser()

        url = env.get("PARCELWATCH_TRACKING_URL")
        if url:
            config_kwargs["tracking_url"] = url

        timeout_env = env.get("PARCELWATCH_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise ConfigError(f"PARCELWATCH_TIMEOUT must be a number, got {timeout_env!r}") from exc

        if "mute_notifications" not in overrides:
            config_kwargs["mute_notifications"] = _env_bool(env.get("PARCELWATCH_MUTE"), False)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)


class TrackingConfig(BaseModel):
    """Tracking number and destination country, as saved on disk."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    track_number: str = Field(default="", alias="TRACK_NUMBER")
    country: str = Field(default="", alias="COUNTRY")

    def to_file(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class TrackingConfigFile:
    """Reads and writes ``tracking.json``."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> TrackingConfig:
        try:
            payload = read_json(self._path)
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Cannot read tracking config: {exc}") from exc
        if payload is None:
            _logger.debug("No tracking config at %s yet", self._path)
            return TrackingConfig()
        if not isinstance(payload, dict):
            raise ConfigError(f"{self._path} must contain a JSON object")
        try:
            return TrackingConfig.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"Invalid tracking config in {self._path}: {exc}") from exc

    def save(self, tracking: TrackingConfig) -> None:
        try:
            write_json_atomic(self._path, tracking.to_file())
        except OSError as exc:
            raise ConfigError(f"Cannot write tracking config to {self._path}: {exc}") from exc
        _logger.debug("Saved tracking config to %s", self._path)
