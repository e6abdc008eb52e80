"""
Tests for best-effort availability reconciliation.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping

import pytest

from salon_agenda.application.use_cases.availability_reconciler import AvailabilityReconciler
from salon_agenda.domain.entities.booking import Booking
from salon_agenda.domain.entities.slot import SlotAvailability
from salon_agenda.infrastructure.store.memory_store import MemoryDocumentCollection


class FailingCollection(MemoryDocumentCollection):
    """Memory collection whose writes to chosen ids fail like a dropped connection."""

    def __init__(self, name: str, failing_ids: set[str], documents=None) -> None:
        super().__init__(name, documents)
        self.failing_ids = failing_ids
        self.writes: list[str] = []

    async def set(self, doc_id: str, fields: Mapping[str, Any], merge: bool = True) -> None:
        self.writes.append(doc_id)
        if doc_id in self.failing_ids:
            raise ConnectionError("network down")
        await super().set(doc_id, fields, merge)

    async def get(self, doc_id: str) -> dict[str, Any] | None:
        if doc_id in self.failing_ids:
            raise ConnectionError("network down")
        return await super().get(doc_id)


def _booking(day: date, hhmm: str, booking_id: str = "b1") -> Booking:
    return Booking(id=booking_id, name="Coupe - Dupont", service="Coupe", date=day, time=hhmm, client_name="Dupont")


@pytest.mark.asyncio
async def test_on_create_creates_missing_record(reconciler, availability, clock):
    assert await reconciler.on_create(_booking(date(2024, 6, 10), "10:00")) is True

    assert await reconciler.cell("2024-06-10_1000") == SlotAvailability(
        id="2024-06-10_1000",
        date="2024-06-10",
        time="10:00",
        is_available=False,
        last_updated=clock.now(),
    )
    assert await reconciler.cell("2024-06-10_1100") is None


@pytest.mark.asyncio
async def test_on_create_marks_existing_record(reconciler, availability):
    await availability.set(
        "2024-06-10_1000",
        {"date": "2024-06-10", "time": "10:00", "isAvailable": True, "note": "kept"},
    )

    await reconciler.on_create(_booking(date(2024, 6, 10), "10:00"))

    assert (await reconciler.cell("2024-06-10_1000")).is_available is False
    assert (await availability.get("2024-06-10_1000"))["note"] == "kept"


@pytest.mark.asyncio
async def test_on_create_failure_is_swallowed(clock, caplog):
    availability = FailingCollection("availableSlots", {"2024-06-10_1000"})
    reconciler = AvailabilityReconciler(availability, clock)

    assert await reconciler.on_create(_booking(date(2024, 6, 10), "10:00")) is False
    assert "not updated" in caplog.text


@pytest.mark.asyncio
async def test_on_update_frees_old_and_occupies_new(reconciler, availability):
    old = _booking(date(2024, 6, 10), "10:00")
    new = _booking(date(2024, 6, 12), "11:00")
    await reconciler.on_create(old)

    assert await reconciler.on_update(old, new) is True

    assert (await reconciler.cell("2024-06-10_1000")).is_available is True
    assert (await reconciler.cell("2024-06-12_1100")).is_available is False


@pytest.mark.asyncio
async def test_on_update_same_cell_is_a_no_op(clock):
    availability = FailingCollection("availableSlots", set())
    reconciler = AvailabilityReconciler(availability, clock)
    booking = _booking(date(2024, 6, 10), "10:00")

    assert await reconciler.on_update(booking, booking) is True
    assert availability.writes == []


@pytest.mark.asyncio
async def test_failure_before_new_cell_leaves_old_cell_free(clock):
    """A crash between the two writes frees the old cell and leaves the new one untouched."""
    availability = FailingCollection(
        "availableSlots",
        {"2024-06-12_1100"},
        documents={
            "2024-06-10_1000": {"date": "2024-06-10", "time": "10:00", "isAvailable": False},
            "2024-06-12_1100": {"date": "2024-06-12", "time": "11:00", "isAvailable": True},
        },
    )
    reconciler = AvailabilityReconciler(availability, clock)

    result = await reconciler.on_update(
        _booking(date(2024, 6, 10), "10:00"),
        _booking(date(2024, 6, 12), "11:00"),
    )

    assert result is False
    snapshot = availability.snapshot()
    assert snapshot["2024-06-10_1000"]["isAvailable"] is True
    assert snapshot["2024-06-12_1100"] == {"date": "2024-06-12", "time": "11:00", "isAvailable": True}
    assert availability.writes == ["2024-06-10_1000", "2024-06-12_1100"]


@pytest.mark.asyncio
async def test_failure_on_old_cell_skips_new_cell(clock):
    availability = FailingCollection("availableSlots", {"2024-06-10_1000"})
    reconciler = AvailabilityReconciler(availability, clock)

    result = await reconciler.on_update(
        _booking(date(2024, 6, 10), "10:00"),
        _booking(date(2024, 6, 12), "11:00"),
    )

    assert result is False
    assert availability.writes == ["2024-06-10_1000"]
    assert await availability.get("2024-06-12_1100") is None


@pytest.mark.asyncio
async def test_rebuild_recomputes_index_from_bookings(reconciler, availability, clock):
    await availability.set("2024-06-10_1000", {"date": "2024-06-10", "time": "10:00", "isAvailable": False})
    await availability.set("2024-06-11_0900", {"date": "2024-06-11", "time": "09:00", "isAvailable": False})
    await availability.set("2024-07-01_0900", {"date": "2024-07-01", "time": "09:00", "isAvailable": False})

    result = await reconciler.rebuild(
        date(2024, 6, 1),
        date(2024, 6, 30),
        [_booking(date(2024, 6, 11), "09:00"), _booking(date(2024, 6, 12), "14:30", "b2")],
    )

    assert result.occupied == 2
    assert result.freed == 1
    snapshot = availability.snapshot()
    assert snapshot["2024-06-10_1000"]["isAvailable"] is True
    assert snapshot["2024-06-11_0900"]["isAvailable"] is False
    assert snapshot["2024-06-12_1430"]["isAvailable"] is False
    # outside the rebuilt range
    assert snapshot["2024-07-01_0900"]["isAvailable"] is False
    assert snapshot["2024-06-10_1000"]["lastUpdated"] == clock.now()


@pytest.mark.asyncio
async def test_cell_reads_legacy_record_without_flag(reconciler, availability):
    """Records written before the flag existed count as available."""
    await availability.set("2024-06-10_0900", {"date": "2024-06-10", "time": "09:00"})

    cell = await reconciler.cell("2024-06-10_0900")

    assert cell.is_available is True
    assert cell.last_updated is None
