from __future__ import annotations

import json
from pathlib import Path

import pytest

from parcelwatch.config import MonitorConfig, TrackingConfig, TrackingConfigFile, resolve_interval
from parcelwatch.exceptions import ConfigError


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (1000, 300_000),
        ("1000", 300_000),
        (40000, 40_000),
        ("40000", 40_000),
        ("30000", 30_000),
        ("29999", 300_000),
        ("", 300_000),
        ("   ", 300_000),
        ("five minutes", 300_000),
        (None, 300_000),
        (True, 300_000),
    ],
)
def test_resolve_interval_floor(raw: object, expected: int) -> None:
    assert resolve_interval(raw) == expected


@pytest.mark.parametrize("api_key", ["", "   ", "changeme", "your_api_key", "<api key>"])
def test_validate_rejects_missing_or_placeholder_key(tmp_path: Path, api_key: str) -> None:
    with pytest.raises(ConfigError, match="PARCELSAPP_API_KEY"):
        MonitorConfig(api_key=api_key, data_dir=tmp_path).validate()


def test_validate_rejects_short_interval(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="poll interval"):
        MonitorConfig(api_key="real-key", data_dir=tmp_path, poll_interval_ms=1000).validate()


def test_kill_delay_is_interval_minus_margin(tmp_path: Path) -> None:
    config = MonitorConfig(api_key="real-key", data_dir=tmp_path, poll_interval_ms=40_000)
    assert config.kill_delay == pytest.approx(39.5)


def test_from_env_reads_key_home_and_mute(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PARCELSAPP_API_KEY", "abc123")
    monkeypatch.setenv("PARCELWATCH_HOME", str(tmp_path))
    monkeypatch.setenv("PARCELWATCH_MUTE", "yes")
    monkeypatch.setenv("PARCELWATCH_TIMEOUT", "12.5")

    config = MonitorConfig.from_env()

    assert config.api_key == "abc123"
    assert config.data_dir == tmp_path
    assert config.mute_notifications is True
    assert config.request_timeout == 12.5
    assert config.last_state_file == tmp_path / "laststate.json"


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PARCELSAPP_API_KEY", "abc123")
    monkeypatch.setenv("PARCELWATCH_TIMEOUT", "12.5")

    config = MonitorConfig.from_env(data_dir=tmp_path, request_timeout=3.0)

    assert config.request_timeout == 3.0
    assert config.data_dir == tmp_path


def test_from_env_rejects_non_numeric_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARCELWATCH_TIMEOUT", "soon")
    with pytest.raises(ConfigError):
        MonitorConfig.from_env()


def test_tracking_file_round_trip(tmp_path: Path) -> None:
    tracking_file = TrackingConfigFile(tmp_path / "tracking.json")
    tracking = TrackingConfig(track_number="LB123456789CN", country="Germany")

    tracking_file.save(tracking)

    assert json.loads((tmp_path / "tracking.json").read_text(encoding="utf-8")) == {
        "TRACK_NUMBER": "LB123456789CN",
        "COUNTRY": "Germany",
    }
    assert tracking_file.load() == tracking


def test_tracking_file_missing_is_empty(tmp_path: Path) -> None:
    assert TrackingConfigFile(tmp_path / "nope.json").load() == TrackingConfig()


def test_tracking_file_malformed_json_is_config_error(tmp_path: Path) -> None:
    path = tmp_path / "tracking.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError):
        TrackingConfigFile(path).load()


def test_tracking_file_must_hold_object(tmp_path: Path) -> None:
    path = tmp_path / "tracking.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ConfigError):
        TrackingConfigFile(path).load()
