"""Startup questions and merging answers into the saved tracking config."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from parcelwatch.config import TrackingConfig, resolve_interval

_logger = logging.getLogger(__name__)

TRACK_NUMBER_QUESTION = "Enter your tracking number or leave it blank if you saved it before"
COUNTRY_QUESTION = "Enter destination country or leave it blank if you saved it before"
UPDATE_INTERVAL_QUESTION = "Enter custom update interval in ms if needed (>=30000). Default is 300000"


@dataclass(frozen=True, slots=True)
class PromptAnswers:
    track_number: str = ""
    country: str = ""
    update_interval: str = ""


def _ask_one(question: str, input_fn: Callable[[str], str]) -> str:
    try:
        return input_fn(f"? {question}: ").strip()
    except EOFError:
        return ""


def ask(input_fn: Callable[[str], str] = input) -> PromptAnswers:
    """Ask the three startup questions. EOF counts as a blank answer."""
    _logger.info("Initializing prompts")
    return PromptAnswers(
        track_number=_ask_one(TRACK_NUMBER_QUESTION, input_fn),
        country=_ask_one(COUNTRY_QUESTION, input_fn),
        update_interval=_ask_one(UPDATE_INTERVAL_QUESTION, input_fn),
    )


def apply_answers(answers: PromptAnswers, stored: TrackingConfig) -> tuple[TrackingConfig, bool]:
    """Merge *answers* into *stored*; blank answers keep the stored value.

    Returns the merged config and whether it differs from *stored*.
    """
    merged = TrackingConfig(
        track_number=answers.track_number or stored.track_number,
        country=answers.country or stored.country,
    )
    changed = merged != stored
    if changed:
        _logger.warning("Track number or country changed, overwriting saved tracking config")
    return merged, changed


def interval_from_answers(answers: PromptAnswers) -> int:
    return resolve_interval(answers.update_interval)
