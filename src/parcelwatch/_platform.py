"""Per-platform desktop capabilities.

Notifications and killing stray tray processes need OS specific helpers.
Clipboard access goes through pyperclip, which picks its own per-OS
mechanism. Each platform gets one :class:`Platform` subclass and
:func:`select_platform` picks the right one once at startup.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path

import psutil
import pyperclip

from parcelwatch.exceptions import PlatformError

_logger = logging.getLogger(__name__)

_HELPER_TIMEOUT = 10.0


def _run(args: list[str]) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            check=False,
            timeout=_HELPER_TIMEOUT,
        )
    except FileNotFoundError as exc:
        raise PlatformError(f"{args[0]} is not installed") from exc
    except subprocess.TimeoutExpired as exc:
        raise PlatformError(f"{args[0]} did not finish within {_HELPER_TIMEOUT}s") from exc


class Platform(ABC):
    """Desktop capabilities the monitor relies on."""

    name: str = "generic"

    @abstractmethod
    def notify(self, title: str, message: str, *, icon: Path | None = None, silent: bool = False) -> None:
        """Show a desktop notification. Must not raise."""

    @abstractmethod
    def kill_by_name(self, marker: str) -> int:
        """Kill every process whose command line contains *marker*.

        Returns the number of processes signalled. Raises
        :class:`PlatformError` when the kill primitive itself fails.
        """

    def copy_to_clipboard(self, text: str) -> bool:
        """Copy *text* to the clipboard.

        Returns ``False`` (after logging a warning) when pyperclip finds no
        copy mechanism, e.g. a Linux desktop without xclip, xsel or wl-copy.
        """
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            _logger.warning("Copying to clipboard is not available on %s: %s", self.name, exc)
            return False
        return True


class _PkillMixin:
    def kill_by_name(self, marker: str) -> int:
        result = _run(["pkill", "-f", "--", marker])
        # pkill: 0 = matched, 1 = nothing matched
        if result.returncode == 0:
            return 1
        if result.returncode == 1:
            return 0
        raise PlatformError(f"pkill exited {result.returncode}: {result.stderr.strip()}")


class LinuxPlatform(_PkillMixin, Platform):
    name = "linux"

    def notify(self, title: str, message: str, *, icon: Path | None = None, silent: bool = False) -> None:
        args = ["notify-send", "--app-name=parcelwatch"]
        if icon is not None:
            args.append(f"--icon={icon}")
        if silent:
            args.append("--hint=boolean:suppress-sound:true")
        args.extend([title, message])
        try:
            result = _run(args)
        except PlatformError as exc:
            _logger.warning("Notification not shown: %s", exc)
            return
        if result.returncode != 0:
            _logger.warning("notify-send exited %d: %s", result.returncode, result.stderr.strip())


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class MacPlatform(_PkillMixin, Platform):
    name = "darwin"

    def notify(self, title: str, message: str, *, icon: Path | None = None, silent: bool = False) -> None:
        script = f"display notification {_applescript_quote(message)} with title {_applescript_quote(title)}"
        if not silent:
            script += ' sound name "default"'
        try:
            result = _run(["osascript", "-e", script])
        except PlatformError as exc:
            _logger.warning("Notification not shown: %s", exc)
            return
        if result.returncode != 0:
            _logger.warning("osascript exited %d: %s", result.returncode, result.stderr.strip())


class WindowsPlatform(Platform):
    name = "win32"

    def notify(self, title: str, message: str, *, icon: Path | None = None, silent: bool = False) -> None:
        try:
            from win11toast import notify
        except ImportError:
            _logger.warning("win11toast is not installed; notification not shown")
            return
        kwargs: dict[str, object] = {"app_id": "parcelwatch"}
        if icon is not None:
            kwargs["icon"] = str(icon)
        if silent:
            kwargs["audio"] = {"silent": "true"}
        try:
            notify(title, message, **kwargs)
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Windows notification failed: %s", exc)

    def kill_by_name(self, marker: str) -> int:
        # taskkill /im only matches image names and every tray host is python.exe,
        # so match on the command line instead.
        killed = 0
        own_pid = os.getpid()
        for proc in psutil.process_iter(["pid", "cmdline"]):
            try:
                cmdline = proc.info.get("cmdline") or []
                if proc.pid == own_pid or marker not in " ".join(cmdline):
                    continue
                proc.kill()
                killed += 1
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied as exc:
                raise PlatformError(f"Access denied killing pid {proc.pid}") from exc
        return killed


def select_platform(system: str | None = None) -> Platform:
    """Return the :class:`Platform` implementation for *system* (default: this host)."""
    system = system or sys.platform
    if system.startswith("win"):
        return WindowsPlatform()
    if system == "darwin":
        return MacPlatform()
    return LinuxPlatform()
