"""Response models and the normalized shipment snapshot."""

from parcelwatch.models.parcel import Attribute, DetectedCarrier, ParcelResponse, ParcelState, Shipment
from parcelwatch.models.snapshot import (
    Event,
    FetchResult,
    Pending,
    Place,
    Ready,
    ShipmentSnapshot,
    placeholder_snapshot,
)

__all__ = [
    "Attribute",
    "DetectedCarrier",
    "Event",
    "FetchResult",
    "ParcelResponse",
    "ParcelState",
    "Pending",
    "Place",
    "Ready",
    "Shipment",
    "ShipmentSnapshot",
    "placeholder_snapshot",
]
