"""Transition check between the stored and the freshly fetched status."""

from __future__ import annotations

from dataclasses import dataclass

from parcelwatch._constants import NO_DATA
from parcelwatch.models.snapshot import ShipmentSnapshot
from parcelwatch.state.store import LastState


@dataclass(frozen=True, slots=True)
class Unchanged:
    reason: str = "same"


@dataclass(frozen=True, slots=True)
class Changed:
    new_status: str
    previous_status: str | None = None


Detection = Unchanged | Changed


def detect(previous: LastState, fresh: ShipmentSnapshot) -> Detection:
    """Decide whether *fresh* is a transition away from *previous*.

    The key is the most recent event's status, not the top-level shipment
    status. Degraded placeholders never count, nor does a snapshot whose
    newest event is missing or has no status.
    """
    if fresh.degraded:
        return Unchanged(reason="degraded")

    current = fresh.current_status
    if current is None:
        return Unchanged(reason="no events")
    if current == NO_DATA:
        return Unchanged(reason="no status")

    if current == previous.last_status:
        return Unchanged()

    return Changed(new_status=current, previous_status=previous.last_status)
