"""Normalized shipment snapshot and the tagged fetch result."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from parcelwatch._constants import NO_DATA

#: Attribute label carrying the number of days in transit.
DAYS_IN_TRANSIT_LABEL = "days_transit"


class Event(BaseModel):
    """A single tracking event."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime | None = None
    location: str | None = None
    status: str


class Place(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = NO_DATA
    code: str = NO_DATA

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class ShipmentSnapshot(BaseModel):
    """The normalized result of one fetch.

    ``events`` are ordered newest first. A ``degraded`` snapshot is a
    placeholder built while the provider has no data: every display field
    reads ``"No data"`` and ``last_status`` carries the stored status along.
    """

    model_config = ConfigDict(frozen=True)

    tracking_id: str
    status: str = NO_DATA
    events: tuple[Event, ...] = ()
    origin: Place = Field(default_factory=Place)
    destination: Place = Field(default_factory=Place)
    carrier_name: str = NO_DATA
    attributes: dict[str, str] = Field(default_factory=dict)
    """Attribute label to value, in provider order."""
    degraded: bool = False
    last_status: str | None = None
    """Stored status at the time a degraded placeholder was built. Never displayed."""

    @property
    def current_status(self) -> str | None:
        """Status of the most recent event, the value transitions are keyed on."""
        if not self.events:
            return None
        return self.events[0].status

    @property
    def days_in_transit(self) -> str:
        value = self.attributes.get(DAYS_IN_TRANSIT_LABEL)
        if value:
            return value
        if self.attributes:
            return list(self.attributes.values())[-1]
        return NO_DATA


def placeholder_snapshot(tracking_id: str, last_status: str | None) -> ShipmentSnapshot:
    """Snapshot shown while the provider only acknowledged the request."""
    return ShipmentSnapshot(
        tracking_id=tracking_id,
        events=(),
        degraded=True,
        last_status=last_status,
    )


@dataclass(frozen=True, slots=True)
class Ready:
    """The provider returned shipment data."""

    snapshot: ShipmentSnapshot


@dataclass(frozen=True, slots=True)
class Pending:
    """The provider acknowledged the request without data (not an error)."""

    uuid: str


FetchResult = Ready | Pending
