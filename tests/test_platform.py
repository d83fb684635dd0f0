from __future__ import annotations

import logging
import subprocess

import pyperclip
import pytest

from parcelwatch import _platform
from parcelwatch._platform import LinuxPlatform, MacPlatform, WindowsPlatform, select_platform
from parcelwatch.exceptions import PlatformError


def _completed(returncode: int, stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout="", stderr=stderr)


@pytest.mark.parametrize(
    ("system", "expected"),
    [("linux", LinuxPlatform), ("darwin", MacPlatform), ("win32", WindowsPlatform), ("freebsd14", LinuxPlatform)],
)
def test_select_platform(system: str, expected: type) -> None:
    assert isinstance(select_platform(system), expected)


@pytest.mark.parametrize(("returncode", "killed"), [(0, 1), (1, 0)])
def test_pkill_return_codes(monkeypatch: pytest.MonkeyPatch, returncode: int, killed: int) -> None:
    calls: list[list[str]] = []

    def fake_run(args: list[str]) -> subprocess.CompletedProcess[str]:
        calls.append(args)
        return _completed(returncode)

    monkeypatch.setattr(_platform, "_run", fake_run)

    assert LinuxPlatform().kill_by_name("parcelwatch.tray.host") == killed
    assert calls == [["pkill", "-f", "--", "parcelwatch.tray.host"]]


def test_pkill_failure_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(_platform, "_run", lambda args: _completed(3, "operation not permitted"))

    with pytest.raises(PlatformError, match="operation not permitted"):
        MacPlatform().kill_by_name("parcelwatch.tray.host")


def test_clipboard_copy_uses_pyperclip(monkeypatch: pytest.MonkeyPatch) -> None:
    copied: list[str] = []
    monkeypatch.setattr(pyperclip, "copy", copied.append)

    assert LinuxPlatform().copy_to_clipboard("LB123456789CN") is True
    assert copied == ["LB123456789CN"]


def test_clipboard_without_mechanism_is_logged_noop(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def no_mechanism(_text: str) -> None:
        raise pyperclip.PyperclipException("could not find a copy/paste mechanism")

    monkeypatch.setattr(pyperclip, "copy", no_mechanism)

    with caplog.at_level(logging.WARNING, logger="parcelwatch._platform"):
        assert LinuxPlatform().copy_to_clipboard("LB123456789CN") is False
    assert "not available on linux" in caplog.text


def test_notification_failure_does_not_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    def missing(args: list[str]) -> subprocess.CompletedProcess[str]:
        raise PlatformError(f"{args[0]} is not installed")

    monkeypatch.setattr(_platform, "_run", missing)

    LinuxPlatform().notify("State changed!", "Delivered")
    MacPlatform().notify("State changed!", "Delivered")


def test_linux_notification_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[list[str]] = []

    def fake_run(args: list[str]) -> subprocess.CompletedProcess[str]:
        seen.append(args)
        return _completed(0)

    monkeypatch.setattr(_platform, "_run", fake_run)

    LinuxPlatform().notify("State changed!", "Delivered", silent=True)

    assert seen[0][0] == "notify-send"
    assert seen[0][-2:] == ["State changed!", "Delivered"]
    assert "--hint=boolean:suppress-sound:true" in seen[0]


def test_run_reports_missing_binary() -> None:
    with pytest.raises(PlatformError, match="is not installed"):
        _platform._run(["parcelwatch-definitely-not-a-binary"])
