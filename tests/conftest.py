from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pyperclip
import pytest

from parcelwatch._platform import Platform
from parcelwatch.config import MonitorConfig
from parcelwatch.exceptions import PlatformError


@dataclass
class Notification:
    title: str
    message: str
    silent: bool


class FakePlatform(Platform):
    name = "fake"

    def __init__(self, *, kill_error: bool = False) -> None:
        self.notifications: list[Notification] = []
        self.copied: list[str] = []
        self.kill_calls: list[str] = []
        self._kill_error = kill_error
        self.on_notify: Any = None

    def notify(self, title: str, message: str, *, icon: Path | None = None, silent: bool = False) -> None:
        if self.on_notify is not None:
            self.on_notify(title, message)
        self.notifications.append(Notification(title=title, message=message, silent=silent))

    def kill_by_name(self, marker: str) -> int:
        self.kill_calls.append(marker)
        if self._kill_error:
            raise PlatformError("pkill exited 3: permission denied")
        return 0


@dataclass
class FakeTransport:
    """Replays canned responses and records request bodies."""

    responses: list[dict[str, Any] | Exception] = field(default_factory=list)
    requests: list[dict[str, Any]] = field(default_factory=list)

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.requests.append({"url": url, **payload})
        if not self.responses:
            raise AssertionError("FakeTransport ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def shipment_payload(
    *statuses: str,
    tracking_id: str = "LB123456789CN",
    status: str = "transit",
    location: str | None = "Leipzig",
) -> dict[str, Any]:
    """Provider response for one shipment whose events are *statuses*, newest first."""
    states = []
    for offset, text in enumerate(statuses):
        state: dict[str, Any] = {"date": f"2026-10-{18 - offset:02d}T09:30:00Z", "carrier": 0, "status": text}
        if location is not None:
            state["location"] = location
        states.append(state)
    return {
        "shipments": [
            {
                "trackingId": tracking_id,
                "status": status,
                "states": states,
                "origin": "China",
                "originCode": "CN",
                "destination": "Germany",
                "destinationCode": "DE",
                "detectedCarrier": {"name": "China Post", "slug": "china-post"},
                "attributes": [
                    {"l": "from", "val": "China"},
                    {"l": "days_transit", "val": "12"},
                ],
                "lastState": states[0] if states else None,
            }
        ],
        "done": True,
        "fromCache": False,
    }


ACK_PAYLOAD: dict[str, Any] = {"uuid": "5f1c2a7e-0000-4000-8000-000000000000"}


@pytest.fixture
def make_platform(monkeypatch: pytest.MonkeyPatch) -> Callable[..., FakePlatform]:
    """Build a FakePlatform whose clipboard writes land in ``copied``.

    With ``clipboard=False`` pyperclip reports no copy mechanism, as it does
    on a Linux desktop without xclip, xsel or wl-copy.
    """

    def factory(*, clipboard: bool = True, kill_error: bool = False) -> FakePlatform:
        platform = FakePlatform(kill_error=kill_error)

        def copy(text: str) -> None:
            if not clipboard:
                raise pyperclip.PyperclipException("could not find a copy/paste mechanism")
            platform.copied.append(text)

        monkeypatch.setattr(pyperclip, "copy", copy)
        return platform

    return factory


@pytest.fixture
def fake_platform(make_platform: Callable[..., FakePlatform]) -> FakePlatform:
    return make_platform()


@pytest.fixture
def config(tmp_path: Path) -> MonitorConfig:
    return MonitorConfig(api_key="test-key-123", data_dir=tmp_path, pending_retries=1)


@pytest.fixture
def make_transport() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture
def make_payload() -> Any:
    return shipment_payload


@pytest.fixture
def ack_payload() -> dict[str, Any]:
    return dict(ACK_PAYLOAD)
