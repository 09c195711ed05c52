"""
Search Result Extractor

Turns a raw search response into flat, dialog-friendly records:
- source fields are spread next to the hit _id
- field_values stays nested
- presenters become a list of names
- start/stop become a FormattedDate in Dutch, in the Europe/Brussels zone

Pure and order preserving: one record per hit, in hit order.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final
from zoneinfo import ZoneInfo

# =============================================================================
# Module Constants
# =============================================================================

DISPLAY_TIMEZONE: Final[ZoneInfo] = ZoneInfo("Europe/Brussels")
TODAY_LABEL: Final[str] = "vandaag"
WEEKDAYS_NL: Final[tuple[str, ...]] = (
    "maandag",
    "dinsdag",
    "woensdag",
    "donderdag",
    "vrijdag",
    "zaterdag",
    "zondag",
)
FULL_DATE_FORMAT: Final[str] = "%d/%m/%Y"
TIME_FORMAT: Final[str] = "%H:%M"

# Source fields that are reshaped instead of spread to the top level
RESERVED_SOURCE_FIELDS: Final[frozenset[str]] = frozenset(
    {"field_values", "presenters", "start", "stop"}
)


# =============================================================================
# Data Models
# =============================================================================


@dataclass(frozen=True)
class FormattedDate:
    """A timestamp rendered for display.

    Attributes:
        full_date: DD/MM/YYYY in the display timezone
        time: HH:MM in the display timezone
        day: Dutch weekday name, or "vandaag" for the current date
    """

    full_date: str
    time: str
    day: str

    def as_dict(self) -> dict[str, str]:
        return {"fullDate": self.full_date, "time": self.time, "day": self.day}


@dataclass
class NormalizedRecord:
    """One search hit reshaped for the dialog session."""

    hit_id: Any
    fields: dict[str, Any] = field(default_factory=dict)
    field_values: Any = None
    presenters: list[str] | None = None
    start: FormattedDate | None = None
    stop: FormattedDate | None = None

    def as_dict(self) -> dict[str, Any]:
        """Flatten to the JSON record shape."""
        record: dict[str, Any] = {"_id": self.hit_id, **self.fields}
        if self.field_values is not None:
            record["field_values"] = self.field_values
        if self.presenters is not None:
            record["presenters"] = self.presenters
        if self.start is not None:
            record["start"] = self.start.as_dict()
        if self.stop is not None:
            record["stop"] = self.stop.as_dict()
        return record


# =============================================================================
# Date Formatting
# =============================================================================


def _to_display_time(value: str | datetime) -> datetime:
    moment = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if moment.tzinfo is None:
        # Naive timestamps are read as display-zone local time
        return moment.replace(tzinfo=DISPLAY_TIMEZONE)
    return moment.astimezone(DISPLAY_TIMEZONE)


def format_date(value: str | datetime, now: datetime | None = None) -> FormattedDate:
    """Format a timestamp for display in the Europe/Brussels zone.

    Args:
        value: ISO-8601 timestamp (or datetime)
        now: Current time, defaults to the real clock

    Returns:
        FormattedDate with day set to "vandaag" when the date is today
    """
    moment = _to_display_time(value)
    today = _to_display_time(now or datetime.now(DISPLAY_TIMEZONE))

    full_date = moment.strftime(FULL_DATE_FORMAT)
    is_today = full_date == today.strftime(FULL_DATE_FORMAT)
    return FormattedDate(
        full_date=full_date,
        time=moment.strftime(TIME_FORMAT),
        day=TODAY_LABEL if is_today else WEEKDAYS_NL[moment.weekday()],
    )


# =============================================================================
# Extraction
# =============================================================================


def presenter_names(presenters: list[Mapping[str, Any]]) -> list[str]:
    """Names of the presenters, in source order."""
    return [presenter.get("name") for presenter in presenters]


def normalize_hit(hit: Mapping[str, Any], now: datetime | None = None) -> NormalizedRecord:
    """Reshape one raw search hit.

    Args:
        hit: Raw hit with _id and _source
        now: Current time used for the "vandaag" label

    Returns:
        NormalizedRecord for the hit
    """
    source: Mapping[str, Any] = hit.get("_source") or {}
    presenters = source.get("presenters")
    start = source.get("start")
    stop = source.get("stop")

    return NormalizedRecord(
        hit_id=hit.get("_id"),
        fields={
            key: value
            for key, value in source.items()
            if key not in RESERVED_SOURCE_FIELDS
        },
        field_values=source.get("field_values"),
        presenters=presenter_names(presenters) if presenters is not None else None,
        start=format_date(start, now) if start else None,
        stop=format_date(stop, now) if stop else None,
    )


def extract_results(
    response: Mapping[str, Any] | None,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Normalize every hit of a raw search response.

    Args:
        response: Raw search response {"hits": {"hits": [...]}}
        now: Current time used for the "vandaag" label

    Returns:
        One flat record per hit, in hit order; [] when there are no hits
    """
    hits = ((response or {}).get("hits") or {}).get("hits") or []
    now = now or datetime.now(DISPLAY_TIMEZONE)
    return [normalize_hit(hit, now).as_dict() for hit in hits]
