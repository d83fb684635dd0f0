"""File-backed store for the last confirmed shipment status."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from parcelwatch._files import read_json, write_json_atomic
from parcelwatch.exceptions import StateStoreError

_logger = logging.getLogger(__name__)


class LastState(BaseModel):
    """Status of the most recent confirmed transition.

    ``last_status`` is ``None`` until the first transition has been seen.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    last_status: str | None = Field(default=None, alias="lastPackageState")


class StateStore:
    """Reads and writes ``laststate.json``.

    Only confirmed transitions are written; degraded fetches never reach
    :meth:`save`.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> LastState:
        try:
            payload = read_json(self._path)
        except (OSError, ValueError) as exc:
            raise StateStoreError(f"Cannot read last state: {exc}") from exc
        if payload is None:
            return LastState()
        if not isinstance(payload, dict):
            raise StateStoreError(f"{self._path} must contain a JSON object")
        try:
            return LastState.model_validate(payload)
        except ValidationError as exc:
            raise StateStoreError(f"Invalid last state in {self._path}: {exc}") from exc

    def save(self, state: LastState) -> None:
        if state.last_status is None:
            raise StateStoreError("Refusing to persist an empty last state")
        try:
            write_json_atomic(self._path, state.model_dump(by_alias=True))
        except OSError as exc:
            raise StateStoreError(f"Cannot write last state to {self._path}: {exc}") from exc
        _logger.debug("Persisted last state %r", state.last_status)
