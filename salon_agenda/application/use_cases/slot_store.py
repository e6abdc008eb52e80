from __future__ import annotations

import logging
from calendar import monthrange
from datetime import date, datetime
from typing import Any

from salon_agenda.application.dto.event_input import ClientData, SlotInput
from salon_agenda.application.exceptions import InvalidStateError, NotFoundError, ValidationError
from salon_agenda.application.mappers.slot_mapper import slot_from_document, slot_input_to_document
from salon_agenda.application.ports.clock import ClockPort
from salon_agenda.application.ports.document_store import DocumentCollectionPort
from salon_agenda.application.utils.grouping import sort_by_start
from salon_agenda.application.utils.time_utils import end_of_day, start_of_day
from salon_agenda.domain.entities.event_type import SlotStatus
from salon_agenda.domain.entities.slot import Slot

DEFAULT_RANGE_MONTHS = 3


class SlotStore:
    """
    Bookable slots with their own lifecycle:
    available -> booked -> cancelled, "completed" being set elsewhere.
    Cancelled and completed slots never go back to available.
    """

    def __init__(self, slots: DocumentCollectionPort, clock: ClockPort) -> None:
        self._slots = slots
        self._clock = clock
        self._cache: dict[str, Slot] = {}
        self._logger = logging.getLogger(__name__)

    @property
    def slots(self) -> list[Slot]:
        return sort_by_start(self._cache.values())

    async def refresh(self, start: datetime | None = None, end: datetime | None = None) -> list[Slot]:
        if start is None or end is None:
            default_start, default_end = default_range(self._clock.now())
            start = start or default_start
            end = end or default_end
        fetched = await self.slots_in_range(start, end)
        for slot_id in [s.id for s in self._cache.values() if start <= s.start_date <= end]:
            del self._cache[slot_id]
        for slot in fetched:
            self._cache[slot.id] = slot
        return fetched

    async def create_slot(self, slot_input: SlotInput) -> Slot:
        if slot_input.end_date <= slot_input.start_date:
            raise ValidationError("Slot end must be after its start.")
        status = slot_input.status or SlotStatus.available
        if status == SlotStatus.booked and not (slot_input.client_name or "").strip():
            raise ValidationError("A booked slot needs a client name.")

        document = slot_input_to_document(slot_input, status, self._clock.now())
        slot_id = await self._slots.insert(document)
        slot = slot_from_document(slot_id, document)
        self._cache[slot_id] = slot
        self._logger.info("Slot created", extra={"slot_id": slot_id})
        return slot

    async def book_slot(self, slot_id: str, client: ClientData) -> Slot:
        slot = await self._require(slot_id)
        if slot.status != SlotStatus.available:
            raise InvalidStateError(f"Slot {slot_id} is {slot.status.value}, not available")
        client_name = client.client_name.strip()
        if not client_name:
            raise ValidationError("Client name is required to book a slot.")

        fields = {
            "clientName": client_name,
            "clientPhone": client.client_phone,
            "clientEmail": client.client_email,
            "status": SlotStatus.booked.value,
            "updatedAt": self._clock.now(),
        }
        await self._slots.patch(slot_id, fields)
        self._logger.info("Slot booked", extra={"slot_id": slot_id})
        return await self._reload(slot_id)

    async def cancel_slot(self, slot_id: str) -> Slot:
        """Cancel a slot. Client fields are kept; cancelling twice re-stamps updatedAt."""
        slot = await self._require(slot_id)
        if slot.status == SlotStatus.completed:
            raise InvalidStateError(f"Slot {slot_id} is completed")
        await self._slots.patch(
            slot_id,
            {"status": SlotStatus.cancelled.value, "updatedAt": self._clock.now()},
        )
        self._logger.info("Slot cancelled", extra={"slot_id": slot_id})
        return await self._reload(slot_id)

    async def slots_in_range(self, start: datetime, end: datetime) -> list[Slot]:
        rows = await self._slots.query_range("startDate", start, end)
        return self._parse_rows(rows)

    async def available_slots_in_range(self, start: datetime, end: datetime) -> list[Slot]:
        rows = await self._slots.query_range(
            "startDate", start, end, equals={"status": SlotStatus.available.value}
        )
        return self._parse_rows(rows)

    async def slot_by_id(self, slot_id: str) -> Slot | None:
        data = await self._slots.get(slot_id)
        if data is None:
            return None
        return slot_from_document(slot_id, data)

    def cached_slot(self, slot_id: str) -> Slot | None:
        return self._cache.get(slot_id)

    def slots_by_day(self, day: date) -> list[Slot]:
        return sort_by_start(s for s in self._cache.values() if s.start_date.date() == day)

    def _parse_rows(self, rows: list[tuple[str, dict[str, Any]]]) -> list[Slot]:
        slots = []
        for doc_id, data in rows:
            try:
                slots.append(slot_from_document(doc_id, data))
            except ValidationError as e:
                self._logger.warning("Skipping malformed slot", extra={"slot_id": doc_id, "error": str(e)})
        return slots

    async def _require(self, slot_id: str) -> Slot:
        slot = await self.slot_by_id(slot_id)
        if slot is None:
            raise NotFoundError(f"Slot {slot_id} not found")
        return slot

    async def _reload(self, slot_id: str) -> Slot:
        slot = await self._require(slot_id)
        self._cache[slot_id] = slot
        return slot


def default_range(now: datetime) -> tuple[datetime, datetime]:
    """Start of the current month to the end of the month two months ahead."""
    first = now.date().replace(day=1)
    month_index = first.month - 1 + DEFAULT_RANGE_MONTHS - 1
    last_year, last_month = first.year + month_index // 12, month_index % 12 + 1
    last = date(last_year, last_month, monthrange(last_year, last_month)[1])
    return start_of_day(first), end_of_day(last)
