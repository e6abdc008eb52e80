from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from salon_agenda.application.exceptions import ReconciliationError
from salon_agenda.application.mappers.slot_mapper import availability_from_document
from salon_agenda.application.ports.clock import ClockPort
from salon_agenda.application.ports.document_store import DocumentCollectionPort
from salon_agenda.application.utils.time_utils import (
    combine_day_and_time,
    date_key,
    format_hhmm,
    slot_key,
)
from salon_agenda.domain.entities.booking import Booking
from salon_agenda.domain.entities.slot import SlotAvailability


@dataclass(frozen=True)
class RebuildResult:
    occupied: int
    freed: int


class AvailabilityReconciler:
    """
    Keeps the availability index ("YYYY-MM-DD_HHMM" -> isAvailable) in step
    with booking writes.

    The booking collection is the source of truth. Index writes happen after
    the booking write, without a transaction, and are best-effort: failures
    are logged and never reported to the caller. When a booking moves, the
    old cell is freed before the new one is occupied, so an interrupted
    update can only leave the old cell wrongly free.
    """

    def __init__(self, availability: DocumentCollectionPort, clock: ClockPort) -> None:
        self._availability = availability
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def cell(self, key: str) -> SlotAvailability | None:
        """Availability record for a "YYYY-MM-DD_HHMM" key, None if never written."""
        data = await self._availability.get(key)
        if data is None:
            return None
        return availability_from_document(key, data)

    async def on_create(self, booking: Booking) -> bool:
        start = combine_day_and_time(booking.date, booking.time)
        key = slot_key(start)
        try:
            await self._occupy_on_create(key, start)
        except ReconciliationError as e:
            self._logger.warning(
                "Availability index not updated after booking create",
                extra={"booking_id": booking.id, "slot_key": key, "error": str(e)},
            )
            return False
        return True

    async def on_update(self, old: Booking, new: Booking) -> bool:
        old_start = combine_day_and_time(old.date, old.time)
        new_start = combine_day_and_time(new.date, new.time)
        old_key, new_key = slot_key(old_start), slot_key(new_start)
        if old_key == new_key:
            return True

        # old cell first; the first failure stops the sequence
        try:
            await self._upsert(old_key, old_start, is_available=True)
            await self._upsert(new_key, new_start, is_available=False)
        except ReconciliationError as e:
            self._logger.warning(
                "Availability index not updated after booking move",
                extra={
                    "booking_id": new.id,
                    "slot_key": f"{old_key}->{new_key}",
                    "error": str(e),
                },
            )
            return False
        return True

    async def rebuild(self, start_day: date, end_day: date, bookings: Iterable[Booking]) -> RebuildResult:
        """
        Recompute the index for [start_day, end_day] from the bookings.

        Every booked cell is marked unavailable and every other stored cell in
        range is marked available again. Unlike on_create/on_update, errors
        propagate: this is an explicit maintenance operation.
        """
        occupied: dict[str, datetime] = {}
        for booking in bookings:
            if start_day <= booking.date <= end_day:
                start = combine_day_and_time(booking.date, booking.time)
                occupied[slot_key(start)] = start

        rows = await self._availability.query_range("date", date_key(start_day), date_key(end_day))
        existing = [availability_from_document(key, data) for key, data in rows]
        now = self._clock.now()

        for key, start in sorted(occupied.items()):
            await self._availability.set(key, self._record(start, False, now), merge=True)

        freed = 0
        for cell in existing:
            if cell.id in occupied or cell.is_available:
                continue
            await self._availability.set(cell.id, {"isAvailable": True, "lastUpdated": now}, merge=True)
            freed += 1

        self._logger.info(
            "Availability index rebuilt",
            extra={"slot_key": f"{date_key(start_day)}..{date_key(end_day)}"},
        )
        return RebuildResult(occupied=len(occupied), freed=freed)

    async def _occupy_on_create(self, key: str, start: datetime) -> None:
        now = self._clock.now()
        try:
            existing = await self._availability.get(key)
            if existing is not None:
                await self._availability.patch(key, {"isAvailable": False, "lastUpdated": now})
            else:
                await self._availability.set(key, self._record(start, False, now), merge=False)
        except Exception as e:
            raise ReconciliationError(f"Could not occupy {key}: {e}") from e

    async def _upsert(self, key: str, start: datetime, is_available: bool) -> None:
        try:
            await self._availability.set(key, self._record(start, is_available, self._clock.now()), merge=True)
        except Exception as e:
            raise ReconciliationError(f"Could not set {key} isAvailable={is_available}: {e}") from e

    @staticmethod
    def _record(start: datetime, is_available: bool, now: datetime) -> dict:
        return {
            "date": date_key(start),
            "time": format_hhmm(start),
            "isAvailable": is_available,
            "lastUpdated": now,
        }
