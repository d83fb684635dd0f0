"""Static tray menu built from a shipment snapshot.

Item positions are part of the contract with the tray host: clicks come back
as item indices, so :data:`CLOSE_INDEX` and :data:`COPY_INDEX` must stay
where they are.
"""

from __future__ import annotations

import os
from datetime import datetime

import psutil
from pydantic import BaseModel, ConfigDict, Field

from parcelwatch._constants import MAX_EVENTS, NO_DATA
from parcelwatch.models.snapshot import Event, ShipmentSnapshot

CLOSE_INDEX = 0
COPY_INDEX = 1
FIRST_EVENT_INDEX = 10

SEPARATOR = "= - = - = - = - = - = - = - = - = - = - = - ="


class TrayItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    tooltip: str = ""
    checked: bool = False
    enabled: bool = True


class TrayMenu(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""
    tooltip: str = "Courier"
    items: tuple[TrayItem, ...] = Field(default_factory=tuple)

    @property
    def event_items(self) -> tuple[TrayItem, ...]:
        return self.items[FIRST_EVENT_INDEX:]


def format_datetime(value: datetime) -> str:
    """Format *value* in local time, e.g. ``Mon, Oct 19, 2026, 3:04 PM``."""
    local = value.astimezone()
    hour = local.hour % 12 or 12
    return f"{local:%a, %b} {local.day}, {local.year}, {hour}:{local:%M %p}"


def format_event(event: Event) -> str:
    when = format_datetime(event.timestamp) if event.timestamp is not None else NO_DATA
    where = f" at {event.location}" if event.location else ""
    return f"[ {when}{where} ] {event.status}"


def resource_usage_line() -> str:
    """Memory usage of the monitor process, in MB."""
    info = psutil.Process(os.getpid()).memory_info()
    rss = round(info.rss / 1024 / 1024, 2)
    vms = round(info.vms / 1024 / 1024, 2)
    return f"RSS: {rss} MB / VMS: {vms} MB"


def _separator() -> TrayItem:
    return TrayItem(title=SEPARATOR, tooltip=SEPARATOR, enabled=False)


def build_menu(snapshot: ShipmentSnapshot, *, usage_line: str | None = None) -> TrayMenu:
    """Lay out the tray menu for *snapshot*.

    Up to ten events are listed newest first; the remaining slots read
    ``"No data"`` and are disabled.
    """
    if usage_line is None:
        usage_line = resource_usage_line()

    items: list[TrayItem] = [
        TrayItem(title="Close Tracker", tooltip="Closes tracker"),
        TrayItem(
            title=f"Currently tracking: {snapshot.tracking_id} (click to copy)",
            tooltip="Short package info",
            checked=True,
        ),
        TrayItem(title=usage_line, tooltip="Memory usage", checked=True),
        _separator(),
        TrayItem(title=f"Origin: {snapshot.origin}", tooltip="Shipment origin"),
        TrayItem(title=f"Destination: {snapshot.destination}", tooltip="Shipment destination"),
        TrayItem(title=f"Carrier: {snapshot.carrier_name}", tooltip="Shipment carrier"),
        TrayItem(title=f"Status: {snapshot.status}", tooltip="Shipment status"),
        TrayItem(
            title=f"Days in transit: {snapshot.days_in_transit}" if snapshot.attributes else NO_DATA,
            tooltip=f"Showing {MAX_EVENTS} recent events",
        ),
        _separator(),
    ]

    events = snapshot.events[:MAX_EVENTS]
    for slot in range(MAX_EVENTS):
        if slot < len(events):
            prefix = "--> " if slot == 0 else ""
            items.append(TrayItem(title=prefix + format_event(events[slot]), tooltip="-", checked=slot == 0))
        else:
            items.append(TrayItem(title=NO_DATA, tooltip="-", enabled=False))

    return TrayMenu(items=tuple(items))
