"""Command line entry point: ``parcelwatch``."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import dataclasses
import logging
import logging.handlers
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from parcelwatch import __version__
from parcelwatch._platform import select_platform
from parcelwatch.client import TrackingClient
from parcelwatch.config import MonitorConfig, TrackingConfig, TrackingConfigFile
from parcelwatch.exceptions import ConfigError, StateStoreError
from parcelwatch.monitor import Monitor
from parcelwatch.prompt import PromptAnswers, apply_answers, ask, interval_from_answers
from parcelwatch.state.store import StateStore

_logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_MAX_BYTES = 10 * 1024 * 1024
_LOG_BACKUPS = 3


def setup_logging(log_dir: Path, *, verbose: bool = False) -> None:
    """Console logging plus rotating ``debug.log`` and ``errors.log`` in *log_dir*."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    formatter = logging.Formatter(_LOG_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(formatter)
    root.addHandler(console)

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        _logger.warning("Cannot create log directory %s, logging to console only: %s", log_dir, exc)
        return

    for name, level in (("debug.log", logging.DEBUG), ("errors.log", logging.ERROR)):
        handler = logging.handlers.RotatingFileHandler(
            log_dir / name,
            maxBytes=_LOG_MAX_BYTES,
            backupCount=_LOG_BACKUPS,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parcelwatch",
        description="Watch one shipment, notify on status changes and keep a tray summary.",
    )
    parser.add_argument("--tracking-id", help="Tracking number (skips that prompt)")
    parser.add_argument("--country", help="Destination country (skips that prompt)")
    parser.add_argument("--interval", help="Poll interval in ms, >= 30000 (skips that prompt)")
    parser.add_argument("--no-prompt", action="store_true", help="Never ask; use saved values and flags only")
    parser.add_argument("--data-dir", type=Path, help="Directory for saved state and logs")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging on the console")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _collect_answers(args: argparse.Namespace) -> PromptAnswers:
    flags = PromptAnswers(
        track_number=(args.tracking_id or "").strip(),
        country=(args.country or "").strip(),
        update_interval=(args.interval or "").strip(),
    )
    if args.no_prompt or any((args.tracking_id, args.country, args.interval)):
        return flags
    if not sys.stdin.isatty():
        _logger.info("stdin is not a terminal, using saved tracking config")
        return flags
    return ask()


def prepare(args: argparse.Namespace) -> tuple[MonitorConfig, TrackingConfig]:
    """Resolve configuration: environment, saved tracking file and answers."""
    overrides: dict[str, object] = {}
    if args.data_dir is not None:
        overrides["data_dir"] = args.data_dir
    base = MonitorConfig.from_env(**overrides)

    tracking_file = TrackingConfigFile(base.tracking_file)
    stored = tracking_file.load()

    _logger.info("Parsing answers")
    answers = _collect_answers(args)
    tracking, changed = apply_answers(answers, stored)
    if changed:
        tracking_file.save(tracking)
    if not tracking.track_number:
        raise ConfigError("No tracking number given and none saved before")

    interval = interval_from_answers(answers)
    config = dataclasses.replace(base, poll_interval_ms=interval).validate()
    return config, tracking


async def _run(config: MonitorConfig, tracking: TrackingConfig) -> None:
    store = StateStore(config.last_state_file)
    # Fail fast on a corrupt state file rather than on every cycle.
    store.load()
    platform = select_platform()
    async with TrackingClient(config) as client:
        monitor = Monitor(config, tracking, client=client, store=store, platform=platform)
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, monitor.stop)
        await monitor.run()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        data_dir = args.data_dir or MonitorConfig.from_env().data_dir
        setup_logging(data_dir, verbose=args.verbose)
        config, tracking = prepare(args)
    except ConfigError as exc:
        _logger.error("Configuration error: %s", exc)
        return 2

    _logger.info("Tracking %s (destination %s)", tracking.track_number, tracking.country or "unknown")
    try:
        asyncio.run(_run(config, tracking))
    except StateStoreError as exc:
        _logger.error("Configuration error: %s", exc)
        return 2
    except KeyboardInterrupt:
        _logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
