"""Base model for tracking provider responses.

Every response model inherits from :class:`ParcelBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips sentinel values
  (``""``, ``"-"``, ``"--"``) so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Sentinel strings the provider uses for "not available".
_SENTINELS = frozenset({"", "-", "--"})


def parse_event_date(value: Any) -> datetime | None:
    """Parse an event date into an aware datetime.

    Accepts ISO-8601 strings (with or without ``Z``), epoch seconds or
    milliseconds. Naive values are taken as UTC. Unparseable values give
    ``None`` rather than failing the whole response.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        ts = float(value)
        if ts >= 1e12:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


EventDate = Annotated[datetime | None, BeforeValidator(parse_event_date)]
"""Annotated type that coerces provider dates to aware datetimes."""


class ParcelBaseModel(BaseModel):
    """Base for tracking provider response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip sentinel values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            cleaned[key] = value
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
