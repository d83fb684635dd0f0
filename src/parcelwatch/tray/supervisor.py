"""Lifecycle of the per-cycle tray process.

The tray widget lives in a child process (see :mod:`parcelwatch.tray.host`)
that does not go away on its own. The supervisor keeps at most one of them
alive: rendering a new menu retires the previous process first, and every
process is retired shortly before the next tick in any case.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from parcelwatch._constants import TRAY_HOST_MODULE
from parcelwatch._platform import Platform
from parcelwatch.exceptions import PlatformError
from parcelwatch.models.snapshot import ShipmentSnapshot
from parcelwatch.tray.menu import TrayMenu, build_menu

_logger = logging.getLogger(__name__)

ActionCallback = Callable[[int, "TrayProcessHandle"], Awaitable[None]]

_EXIT_WAIT_S = 5.0


@dataclass(eq=False)
class TrayProcessHandle:
    """The tray process spawned for one cycle."""

    process: asyncio.subprocess.Process
    tracking_id: str
    menu: TrayMenu
    spawned_at: float = field(default_factory=time.monotonic)
    retired: bool = False
    reader: asyncio.Task[None] | None = None
    retire_timer: asyncio.TimerHandle | None = None

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def alive(self) -> bool:
        return self.process.returncode is None


class TraySupervisor:
    """Spawns and retires tray processes.

    Parameters
    ----------
    platform : Platform
        Provides the kill-by-name sweep for processes that escaped their handle.
    kill_delay : float
        Seconds after a render at which that tray is retired.
    on_action : callable, optional
        ``await on_action(index, handle)`` for every clicked menu item.
    host_command : sequence of str, optional
        Command that starts a tray host. Defaults to ``python -m parcelwatch.tray.host``.
    marker : str
        Command line fragment identifying tray hosts for the sweep.
    """

    def __init__(
        self,
        platform: Platform,
        *,
        kill_delay: float,
        on_action: ActionCallback | None = None,
        host_command: Sequence[str] | None = None,
        marker: str = TRAY_HOST_MODULE,
    ) -> None:
        self._platform = platform
        self._kill_delay = kill_delay
        self._on_action = on_action
        self._host_command = list(host_command) if host_command else [sys.executable, "-m", TRAY_HOST_MODULE]
        self._marker = marker
        self._current: TrayProcessHandle | None = None
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def current(self) -> TrayProcessHandle | None:
        return self._current

    async def render(self, snapshot: ShipmentSnapshot) -> TrayProcessHandle:
        """Show *snapshot* in a fresh tray process, retiring the previous one."""
        menu = build_menu(snapshot)
        async with self._lock:
            if self._current is not None:
                await self._retire(self._current)
            handle = await self._spawn(menu, snapshot.tracking_id)
            self._current = handle
        return handle

    async def retire_stale(self, handle: TrayProcessHandle) -> None:
        """Terminate *handle* and sweep any leftover tray processes.

        Does nothing if *handle* was already retired, so a late timer can
        never hit a newer tray.
        """
        async with self._lock:
            await self._retire(handle)

    async def shutdown(self) -> None:
        async with self._lock:
            if self._current is not None:
                await self._retire(self._current)
        pending = [task for task in self._tasks if task is not asyncio.current_task()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _spawn(self, menu: TrayMenu, tracking_id: str) -> TrayProcessHandle:
        process = await asyncio.create_subprocess_exec(
            *self._host_command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
        )
        assert process.stdin is not None  # noqa: S101
        process.stdin.write(menu.model_dump_json().encode("utf-8") + b"\n")
        try:
            await process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            _logger.warning("Tray process %d exited before reading its menu", process.pid)
        process.stdin.close()

        handle = TrayProcessHandle(process=process, tracking_id=tracking_id, menu=menu)
        handle.reader = self._track(self._read_actions(handle))
        loop = asyncio.get_running_loop()
        handle.retire_timer = loop.call_later(self._kill_delay, self._retire_later, handle)
        _logger.debug("Spawned tray process %d, retiring in %.1fs", process.pid, self._kill_delay)
        return handle

    def _track(self, coro: Awaitable[None]) -> asyncio.Task[None]:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _retire_later(self, handle: TrayProcessHandle) -> None:
        self._track(self.retire_stale(handle))

    async def _retire(self, handle: TrayProcessHandle) -> None:
        if handle.retired:
            return
        handle.retired = True
        if handle.retire_timer is not None:
            handle.retire_timer.cancel()
            handle.retire_timer = None

        if handle.alive:
            try:
                handle.process.kill()
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(handle.process.wait(), timeout=_EXIT_WAIT_S)
            except TimeoutError:
                _logger.error("Tray process %d did not exit after kill", handle.pid)

        try:
            swept = await asyncio.to_thread(self._platform.kill_by_name, self._marker)
        except PlatformError as exc:
            _logger.error("Could not kill stale tray processes: %s", exc)
        else:
            if swept:
                _logger.warning("Killed %d stale tray process(es)", swept)

        if self._current is handle:
            self._current = None
        _logger.debug("Retired tray process %d", handle.pid)

    async def _read_actions(self, handle: TrayProcessHandle) -> None:
        stdout = handle.process.stdout
        if stdout is None:
            return
        async for raw in stdout:
            text = raw.decode("utf-8", errors="replace").strip()
            if not text:
                continue
            try:
                index = int(text)
            except ValueError:
                _logger.debug("Ignoring tray output %r", text)
                continue
            if self._on_action is None:
                continue
            try:
                await self._on_action(index, handle)
            except Exception:
                _logger.exception("Tray action %d failed", index)
