"""Wire models for the shipment tracking response."""

from __future__ import annotations

from pydantic import Field

from parcelwatch.models._base import EventDate, ParcelBaseModel


class ParcelState(ParcelBaseModel):
    """One tracking event as reported by the provider."""

    date: EventDate = None
    location: str | None = None
    carrier: int | None = None
    status: str = ""


class Attribute(ParcelBaseModel):
    """A labelled shipment attribute (e.g. ``days_transit``)."""

    l: str = ""  # noqa: E741
    """Attribute label."""
    val: str = ""
    code: str | None = None
    n: str | None = None


class DetectedCarrier(ParcelBaseModel):
    name: str = ""
    slug: str = ""


class Shipment(ParcelBaseModel):
    """A tracked shipment."""

    tracking_id: str = ""
    status: str = ""
    states: list[ParcelState] = Field(default_factory=list)
    """Events, newest first."""
    origin: str | None = None
    origin_code: str | None = None
    destination: str | None = None
    destination_code: str | None = None
    detected_carrier: DetectedCarrier | None = None
    carriers: list[str] = Field(default_factory=list)
    attributes: list[Attribute] = Field(default_factory=list)
    last_state: ParcelState | None = None


class ParcelResponse(ParcelBaseModel):
    """Top-level tracking response.

    A response carrying only ``uuid`` is an acknowledgment: the provider
    accepted the request but has no shipment data yet.
    """

    shipments: list[Shipment] = Field(default_factory=list)
    done: bool = False
    from_cache: bool = False
    error: str | None = None
    uuid: str | None = None

    @property
    def is_acknowledgment(self) -> bool:
        return bool(self.uuid) and not self.shipments
