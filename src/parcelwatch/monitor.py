"""The polling cycle and the fixed-interval scheduler that drives it."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from parcelwatch._constants import COPY_MESSAGE, COPY_TITLE, STATE_CHANGED_TITLE
from parcelwatch._platform import Platform
from parcelwatch.config import MonitorConfig, TrackingConfig
from parcelwatch.exceptions import StateStoreError, TrackingError
from parcelwatch.models.snapshot import FetchResult, Pending, ShipmentSnapshot, placeholder_snapshot
from parcelwatch.state.detector import Changed, Detection, detect
from parcelwatch.state.store import LastState, StateStore
from parcelwatch.tray.menu import CLOSE_INDEX, COPY_INDEX
from parcelwatch.tray.supervisor import TrayProcessHandle, TraySupervisor

_logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self, tracking: TrackingConfig) -> FetchResult:
        ...


class TraySink(Protocol):
    async def render(self, snapshot: ShipmentSnapshot) -> TrayProcessHandle | None:
        ...

    async def shutdown(self) -> None:
        ...


@dataclass(frozen=True, slots=True)
class CycleOutcome:
    snapshot: ShipmentSnapshot
    detection: Detection
    tray: TrayProcessHandle | None = None


class Monitor:
    """Runs fetch → detect → notify → render cycles for one shipment.

    Cycles never overlap: a tick that arrives while the previous cycle is
    still running (e.g. a slow network call) is skipped and logged.
    """

    def __init__(
        self,
        config: MonitorConfig,
        tracking: TrackingConfig,
        *,
        client: Fetcher,
        store: StateStore,
        platform: Platform,
        tray: TraySink | None = None,
        icon: Path | None = None,
    ) -> None:
        self._config = config
        self._tracking = tracking
        self._client = client
        self._store = store
        self._platform = platform
        self._icon = icon
        self._tray: TraySink = tray or TraySupervisor(
            platform,
            kill_delay=config.kill_delay,
            on_action=self.handle_tray_action,
        )
        self._cycle_lock = asyncio.Lock()
        self._stopped = asyncio.Event()
        self._tasks: set[asyncio.Future[object]] = set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def stop(self) -> None:
        self._stopped.set()

    async def run_cycle(self) -> CycleOutcome:
        """Run one cycle. Tracking and state errors propagate to the caller."""
        _logger.info("Updating data")
        previous = self._store.load()
        result = await self._client.fetch(self._tracking)

        if isinstance(result, Pending):
            _logger.warning("No shipment data yet (uuid %s), showing placeholders", result.uuid)
            snapshot = placeholder_snapshot(self._tracking.track_number, previous.last_status)
        else:
            snapshot = result.snapshot

        detection = detect(previous, snapshot)
        if isinstance(detection, Changed):
            # Persist before notifying: a crash in between loses a notification
            # instead of repeating it after restart.
            self._store.save(LastState(last_status=detection.new_status))
            _logger.warning("State changed!")
            _logger.debug("Previous state: %s", detection.previous_status)
            _logger.debug("New state: %s", detection.new_status)
            await self._notify(STATE_CHANGED_TITLE, detection.new_status, silent=self._config.mute_notifications)
        else:
            _logger.info("State is the same (%s)", detection.reason)

        handle = await self._tray.render(snapshot)
        return CycleOutcome(snapshot=snapshot, detection=detection, tray=handle)

    async def tick(self) -> CycleOutcome | None:
        """Run a cycle unless one is already in flight; per-cycle errors are logged."""
        if self._cycle_lock.locked():
            _logger.warning("Previous cycle is still running, skipping this tick")
            return None
        async with self._cycle_lock:
            try:
                return await self.run_cycle()
            except (TrackingError, StateStoreError) as exc:
                _logger.error("Cycle failed: %s", exc)
                return None
            except Exception:
                _logger.exception("Cycle failed")
                return None

    async def run(self) -> None:
        """Tick immediately, then every ``poll_interval_ms`` until stopped."""
        interval = self._config.poll_interval
        _logger.info("Updating data every %d ms", self._config.poll_interval_ms)
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        try:
            while not self._stopped.is_set():
                self._track(self.tick())
                next_tick += interval
                try:
                    await asyncio.wait_for(self._stopped.wait(), timeout=max(next_tick - loop.time(), 0.0))
                except TimeoutError:
                    pass
        finally:
            for task in list(self._tasks):
                task.cancel()
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            await self._tray.shutdown()
            _logger.info("Monitor stopped")

    async def handle_tray_action(self, index: int, handle: TrayProcessHandle) -> None:
        if index == CLOSE_INDEX:
            _logger.warning("Stopping process")
            self.stop()
        elif index == COPY_INDEX:
            copied = await asyncio.to_thread(self._platform.copy_to_clipboard, handle.tracking_id)
            if copied:
                _logger.info("Copying tracking number (%s) to clipboard!", handle.tracking_id)
                await self._notify(COPY_TITLE, COPY_MESSAGE, silent=True)

    async def _notify(self, title: str, message: str, *, silent: bool) -> None:
        await asyncio.to_thread(self._platform.notify, title, message, icon=self._icon, silent=silent)

    def _track(self, coro: Awaitable[object]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
