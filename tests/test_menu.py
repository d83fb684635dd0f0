from __future__ import annotations

from datetime import UTC, datetime

from parcelwatch.models.snapshot import Event, Place, ShipmentSnapshot, placeholder_snapshot
from parcelwatch.tray.menu import (
    CLOSE_INDEX,
    COPY_INDEX,
    FIRST_EVENT_INDEX,
    build_menu,
    format_datetime,
    format_event,
)


def _snapshot(event_count: int) -> ShipmentSnapshot:
    events = tuple(
        Event(
            timestamp=datetime(2026, 10, 18 - i, 9, 30, tzinfo=UTC),
            location="Leipzig" if i % 2 == 0 else None,
            status=f"Event {i}",
        )
        for i in range(event_count)
    )
    return ShipmentSnapshot(
        tracking_id="LB123456789CN",
        status="transit",
        events=events,
        origin=Place(name="China", code="CN"),
        destination=Place(name="Germany", code="DE"),
        carrier_name="China Post",
        attributes={"days_transit": "12"},
    )


def test_three_events_give_three_enabled_and_seven_placeholder_lines() -> None:
    menu = build_menu(_snapshot(3), usage_line="RSS: 1 MB / VMS: 2 MB")

    events = menu.event_items
    assert len(events) == 10
    assert [item.enabled for item in events] == [True] * 3 + [False] * 7
    assert all(item.title == "No data" for item in events[3:])
    assert events[0].title.startswith("--> [ ")
    assert events[0].title.endswith("] Event 0")
    assert events[0].checked is True
    assert events[1].checked is False


def test_more_than_ten_events_are_capped() -> None:
    menu = build_menu(_snapshot(14), usage_line="usage")

    assert len(menu.items) == FIRST_EVENT_INDEX + 10
    assert menu.event_items[-1].title.endswith("Event 9")


def test_header_and_metadata_lines() -> None:
    menu = build_menu(_snapshot(1), usage_line="RSS: 1 MB / VMS: 2 MB")
    titles = [item.title for item in menu.items]

    assert titles[CLOSE_INDEX] == "Close Tracker"
    assert titles[COPY_INDEX] == "Currently tracking: LB123456789CN (click to copy)"
    assert titles[2] == "RSS: 1 MB / VMS: 2 MB"
    assert "Origin: China (CN)" in titles
    assert "Destination: Germany (DE)" in titles
    assert "Carrier: China Post" in titles
    assert "Status: transit" in titles
    assert "Days in transit: 12" in titles


def test_degraded_snapshot_shows_placeholders() -> None:
    menu = build_menu(placeholder_snapshot("LB123456789CN", "In transit"), usage_line="usage")
    titles = [item.title for item in menu.items]

    assert "Origin: No data (No data)" in titles
    assert "Destination: No data (No data)" in titles
    assert "Carrier: No data" in titles
    assert titles[7] == "Status: No data"
    assert titles[8] == "No data"
    assert all(item.title == "No data" and not item.enabled for item in menu.event_items)


def test_format_event_with_and_without_location() -> None:
    when = datetime(2026, 10, 18, 9, 30, tzinfo=UTC)
    expected_when = format_datetime(when)

    assert format_event(Event(timestamp=when, location="Leipzig", status="Arrived")) == (
        f"[ {expected_when} at Leipzig ] Arrived"
    )
    assert format_event(Event(timestamp=when, status="Arrived")) == f"[ {expected_when} ] Arrived"
    assert format_event(Event(status="Arrived")) == "[ No data ] Arrived"


def test_format_datetime_uses_twelve_hour_clock() -> None:
    text = format_datetime(datetime(2026, 10, 18, 9, 30, tzinfo=UTC))

    assert text.count(",") == 3
    assert text.endswith(("AM", "PM"))
    assert ":30 " in text


def test_default_usage_line_reports_memory() -> None:
    menu = build_menu(_snapshot(0))

    assert menu.items[2].title.startswith("RSS: ")
    assert "MB / VMS: " in menu.items[2].title
