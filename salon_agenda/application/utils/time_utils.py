"""
Wall-clock helpers shared by the mapper, the reconciler and the stores.

All values are naive datetimes in the device's local zone. Nothing here
normalises to UTC.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

from salon_agenda.application.exceptions import ValidationError

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def next_round_hour(from_: datetime | None = None) -> datetime:
    """Return the next full hour, e.g. 15:03 -> 16:00. Used as a default form start."""
    base = from_ if from_ is not None else datetime.now()
    return (base + timedelta(hours=1)).replace(minute=0, second=0, microsecond=0)


def add_minutes(value: datetime, minutes: int) -> datetime:
    return value + timedelta(minutes=minutes)


def end_time(start: datetime, duration_minutes: int) -> datetime:
    return add_minutes(start, duration_minutes)


def format_hhmm(value: datetime | time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def format_duration_label(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    if remaining == 0:
        return f"{hours}h"
    return f"{hours}h{remaining}"


def parse_hhmm(text: str) -> tuple[int, int]:
    """Parse "HH:MM" (legacy records may carry "9:30") into (hour, minute)."""
    match = _HHMM_RE.match(text or "")
    if not match:
        raise ValidationError(f"Invalid time of day: {text!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValidationError(f"Time of day out of range: {text!r}")
    return hour, minute


def combine_day_and_time(day: date, hhmm: str) -> datetime:
    hour, minute = parse_hhmm(hhmm)
    return datetime.combine(day, time(hour=hour, minute=minute))


def date_key(value: date | datetime) -> str:
    return value.strftime("%Y-%m-%d")


def time_key(value: datetime | time) -> str:
    return format_hhmm(value).replace(":", "")


def slot_key(start: datetime) -> str:
    """Availability record id for a wall-clock cell: "YYYY-MM-DD_HHMM"."""
    return f"{date_key(start)}_{time_key(start)}"


def start_of_day(day: date | datetime) -> datetime:
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, time.min)


def end_of_day(day: date | datetime) -> datetime:
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, time.max)
