from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, TypeVar

from salon_agenda.domain.entities.event import Event

T = TypeVar("T")

SECTION_KEYS = ("today", "tomorrow", "this_week", "this_month", "later")


@dataclass(frozen=True)
class AgendaSection:
    key: str  # one of SECTION_KEYS
    events: list[Event]


def sort_by_start(items: Iterable[T]) -> list[T]:
    return sorted(items, key=lambda item: (item.start_date, item.id))


def week_start(day: date, week_starts_on: int = 0) -> date:
    """First day of the week containing `day`. week_starts_on uses date.weekday() numbering."""
    offset = (day.weekday() - week_starts_on) % 7
    return day - timedelta(days=offset)


def group_by_day(events: Iterable[Event]) -> dict[date, list[Event]]:
    grouped: dict[date, list[Event]] = {}
    for event in sort_by_start(events):
        grouped.setdefault(event.start_date.date(), []).append(event)
    return grouped


def group_by_week(events: Iterable[Event], week_starts_on: int = 0) -> dict[date, list[Event]]:
    grouped: dict[date, list[Event]] = {}
    for event in sort_by_start(events):
        grouped.setdefault(week_start(event.start_date.date(), week_starts_on), []).append(event)
    return grouped


def section_key(day: date, reference: date, week_starts_on: int = 0) -> str:
    if day == reference:
        return "today"
    if day == reference + timedelta(days=1):
        return "tomorrow"
    if week_start(day, week_starts_on) == week_start(reference, week_starts_on):
        return "this_week"
    if (day.year, day.month) == (reference.year, reference.month):
        return "this_month"
    return "later"


def by_sections(
    events: Iterable[Event],
    reference: datetime | date,
    week_starts_on: int = 0,
) -> list[AgendaSection]:
    """Agenda buckets in display order; empty buckets are left out."""
    ref_day = reference.date() if isinstance(reference, datetime) else reference
    buckets: dict[str, list[Event]] = {key: [] for key in SECTION_KEYS}
    for event in sort_by_start(events):
        buckets[section_key(event.start_date.date(), ref_day, week_starts_on)].append(event)
    return [AgendaSection(key=key, events=buckets[key]) for key in SECTION_KEYS if buckets[key]]
