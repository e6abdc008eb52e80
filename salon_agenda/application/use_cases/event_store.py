from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta

from salon_agenda.application.dto.event_input import EventInput, EventPatch
from salon_agenda.application.exceptions import NotFoundError, ValidationError
from salon_agenda.application.mappers.booking_mapper import (
    BookingMapper,
    booking_from_document,
    booking_to_document,
    split_professional_name,
    with_id,
)
from salon_agenda.application.ports.clock import ClockPort
from salon_agenda.application.ports.document_store import DocumentCollectionPort
from salon_agenda.application.use_cases.availability_reconciler import (
    AvailabilityReconciler,
    RebuildResult,
)
from salon_agenda.application.utils.grouping import (
    AgendaSection,
    by_sections,
    group_by_day,
    group_by_week,
    sort_by_start,
)
from salon_agenda.application.utils.time_utils import end_of_day, start_of_day
from salon_agenda.domain.entities.booking import Booking
from salon_agenda.domain.entities.event import Event
from salon_agenda.domain.entities.event_type import EventType


class EventStore:
    """
    Working set of calendar events plus the write operations the UI calls.

    The cache only knows what was fetched by refresh() or written through
    this store. A refresh replaces the cached events of its own range and
    leaves other ranges alone.
    """

    def __init__(
        self,
        bookings: DocumentCollectionPort,
        mapper: BookingMapper,
        reconciler: AvailabilityReconciler,
        clock: ClockPort,
        week_starts_on: int = 0,
    ) -> None:
        self._bookings = bookings
        self._mapper = mapper
        self._reconciler = reconciler
        self._clock = clock
        self._week_starts_on = week_starts_on
        self._events: dict[str, Event] = {}
        self._records: dict[str, Booking] = {}
        self._loaded_ranges: list[tuple[date, date]] = []
        self._logger = logging.getLogger(__name__)

    @property
    def events(self) -> list[Event]:
        return sort_by_start(self._events.values())

    @property
    def loaded_ranges(self) -> list[tuple[date, date]]:
        return list(self._loaded_ranges)

    async def refresh(self, start: date | datetime, end: date | datetime) -> list[Event]:
        start_day, end_day = _as_day(start), _as_day(end)
        rows = await self._bookings.query_range("date", start_of_day(start_day), end_of_day(end_day))

        fetched: dict[str, tuple[Booking, Event]] = {}
        for doc_id, data in rows:
            try:
                booking = booking_from_document(doc_id, data)
                fetched[doc_id] = (booking, self._mapper.to_event(booking))
            except ValidationError as e:
                self._logger.warning("Skipping malformed booking", extra={"booking_id": doc_id, "error": str(e)})

        stale = [
            event_id
            for event_id, event in self._events.items()
            if start_day <= event.start_date.date() <= end_day
        ]
        for event_id in stale:
            self._forget(event_id)
        for doc_id, (booking, event) in fetched.items():
            self._records[doc_id] = booking
            self._events[doc_id] = event

        if (start_day, end_day) not in self._loaded_ranges:
            self._loaded_ranges.append((start_day, end_day))
        return sort_by_start(event for _, event in fetched.values())

    async def create(self, event_input: EventInput) -> Event:
        booking = self._mapper.to_booking(event_input, created_at=self._clock.now())
        doc_id = await self._bookings.insert(booking_to_document(booking))
        booking = with_id(booking, doc_id)
        self._logger.info(
            "Booking created",
            extra={"booking_id": doc_id, "event_type": booking.event_type.value},
        )

        await self._reconciler.on_create(booking)

        event = self._mapper.to_event(booking)
        if event_input.end_date is not None:
            # the end given on create wins over the catalog default
            event = replace(event, end_date=event_input.end_date)
        self._records[doc_id] = booking
        self._events[doc_id] = event
        return event

    async def update(self, event_id: str, patch: EventPatch) -> Event:
        current = await self._load(event_id)
        changes = {
            key: value
            for key, value in patch.provided().items()
            if value is not None or key not in ("start_date", "event_type")
        }
        draft = self._merge(current, changes)

        updated = self._mapper.to_booking(draft)
        updated = replace(updated, id=event_id, status=current.status, created_at=current.created_at)

        before = booking_to_document(current)
        after = booking_to_document(updated)
        fields = {key: value for key, value in after.items() if before.get(key) != value}
        if fields:
            await self._bookings.patch(event_id, fields)
            self._logger.info("Booking updated", extra={"booking_id": event_id})

        date_changed = "start_date" in changes and (current.date, current.time) != (updated.date, updated.time)
        if date_changed:
            await self._reconciler.on_update(current, updated)

        event = self._mapper.to_event(updated)
        self._records[event_id] = updated
        self._events[event_id] = event
        return event

    async def delete(self, event_id: str) -> None:
        if event_id not in self._records and await self._bookings.get(event_id) is None:
            raise NotFoundError(f"Booking {event_id} not found")
        # The availability record is left as is; see rebuild_availability().
        await self._bookings.delete(event_id)
        self._forget(event_id)
        self._logger.info("Booking deleted", extra={"booking_id": event_id})

    def by_id(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    def events_on(self, day: date) -> list[Event]:
        return group_by_day(self._events.values()).get(day, [])

    def group_by_day(self) -> dict[date, list[Event]]:
        return group_by_day(self._events.values())

    def group_by_week(self) -> dict[date, list[Event]]:
        return group_by_week(self._events.values(), self._week_starts_on)

    def by_sections(self, reference: datetime | date | None = None) -> list[AgendaSection]:
        return by_sections(self._events.values(), reference or self._clock.now(), self._week_starts_on)

    async def rebuild_availability(self, start: date | datetime, end: date | datetime) -> RebuildResult:
        """Recompute the availability index of a day range from the stored bookings."""
        start_day, end_day = _as_day(start), _as_day(end)
        rows = await self._bookings.query_range("date", start_of_day(start_day), end_of_day(end_day))
        bookings = []
        for doc_id, data in rows:
            try:
                bookings.append(booking_from_document(doc_id, data))
            except ValidationError as e:
                self._logger.warning("Skipping malformed booking", extra={"booking_id": doc_id, "error": str(e)})
        return await self._reconciler.rebuild(start_day, end_day, bookings)

    async def _load(self, event_id: str) -> Booking:
        cached = self._records.get(event_id)
        if cached is not None:
            return cached
        data = await self._bookings.get(event_id)
        if data is None:
            raise NotFoundError(f"Booking {event_id} not found")
        return booking_from_document(event_id, data)

    def _merge(self, current: Booking, changes: dict) -> EventInput:
        event = self._mapper.to_event(current)
        # Without a stored duration the end stays catalog-derived.
        keep_end = current.duration_minutes is not None
        draft = self._mapper.input_from_event(event, keep_end=keep_end)
        draft = draft.model_copy(update={"color": current.color})

        if changes.get("start_date") and "end_date" not in changes and keep_end:
            # moving an event keeps its length
            changes = {**changes, "end_date": changes["start_date"] + timedelta(minutes=event.duration_minutes)}

        event_type = changes.get("event_type") or current.event_type
        if (
            event_type == EventType.professional
            and changes.get("title")
            and "service" not in changes
            and "client_name" not in changes
        ):
            service, client_name = split_professional_name(changes["title"])
            if service and client_name:
                changes = {**changes, "service": service, "client_name": client_name}

        return draft.model_copy(update=changes)

    def _forget(self, event_id: str) -> None:
        self._events.pop(event_id, None)
        self._records.pop(event_id, None)


def _as_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value
