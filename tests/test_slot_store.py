"""
Tests for the slot lifecycle: available -> booked -> cancelled.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from salon_agenda.application.dto.event_input import ClientData, SlotInput
from salon_agenda.application.exceptions import InvalidStateError, NotFoundError, ValidationError
from salon_agenda.application.use_cases.slot_store import default_range
from salon_agenda.domain.entities.event_type import SlotStatus


def _slot_input(hour: int = 10, day: int = 10, **overrides) -> SlotInput:
    values = dict(
        start_date=datetime(2024, 6, day, hour, 0),
        end_date=datetime(2024, 6, day, hour + 1, 0),
        service="Coupe",
        price=35,
        location="Salon de coiffure",
    )
    values.update(overrides)
    return SlotInput(**values)


CLIENT = ClientData(client_name="Marie Dupont", client_phone="0612345678", client_email="marie@example.com")


@pytest.mark.asyncio
async def test_create_slot_defaults_to_available(slot_store, slots, clock):
    slot = await slot_store.create_slot(_slot_input())

    assert slot.id
    assert slot.status == SlotStatus.available
    assert slot.price == 35.0
    assert slot.created_at == clock.now()
    stored = await slots.get(slot.id)
    assert stored["status"] == "available"
    assert stored["startDate"] == datetime(2024, 6, 10, 10, 0)


@pytest.mark.asyncio
async def test_create_slot_rejects_empty_interval(slot_store, slots):
    with pytest.raises(ValidationError):
        await slot_store.create_slot(_slot_input(end_date=datetime(2024, 6, 10, 10, 0)))
    assert slots.snapshot() == {}


@pytest.mark.asyncio
async def test_create_booked_slot_requires_client(slot_store):
    with pytest.raises(ValidationError):
        await slot_store.create_slot(_slot_input(status=SlotStatus.booked))


@pytest.mark.asyncio
async def test_book_available_slot(slot_store, clock):
    slot = await slot_store.create_slot(_slot_input())
    clock.advance(minutes=5)

    booked = await slot_store.book_slot(slot.id, CLIENT)

    assert booked.status == SlotStatus.booked
    assert booked.client_name == "Marie Dupont"
    assert booked.client_email == "marie@example.com"
    assert booked.updated_at == clock.now()
    assert slot_store.cached_slot(slot.id) == booked


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [SlotStatus.booked, SlotStatus.cancelled])
async def test_book_unavailable_slot_is_rejected(slot_store, slots, status):
    """Booking a booked or cancelled slot raises and changes nothing."""
    slot = await slot_store.create_slot(_slot_input())
    await slot_store.book_slot(slot.id, ClientData(client_name="Premier"))
    if status == SlotStatus.cancelled:
        await slot_store.cancel_slot(slot.id)
    before = await slots.get(slot.id)

    with pytest.raises(InvalidStateError):
        await slot_store.book_slot(slot.id, CLIENT)

    assert await slots.get(slot.id) == before


@pytest.mark.asyncio
async def test_book_slot_requires_client_name(slot_store):
    slot = await slot_store.create_slot(_slot_input())
    with pytest.raises(ValidationError):
        await slot_store.book_slot(slot.id, ClientData(client_name="   "))


@pytest.mark.asyncio
async def test_book_unknown_slot(slot_store):
    with pytest.raises(NotFoundError):
        await slot_store.book_slot("missing", CLIENT)


@pytest.mark.asyncio
async def test_cancel_keeps_client_history_and_restamps(slot_store, clock):
    slot = await slot_store.create_slot(_slot_input())
    await slot_store.book_slot(slot.id, CLIENT)

    clock.advance(minutes=10)
    cancelled = await slot_store.cancel_slot(slot.id)
    assert cancelled.status == SlotStatus.cancelled
    assert cancelled.client_name == "Marie Dupont"
    first_stamp = cancelled.updated_at

    clock.advance(minutes=10)
    again = await slot_store.cancel_slot(slot.id)
    assert again.status == SlotStatus.cancelled
    assert again.updated_at > first_stamp


@pytest.mark.asyncio
async def test_completed_slot_cannot_be_cancelled(slot_store, slots):
    slot = await slot_store.create_slot(_slot_input())
    await slots.patch(slot.id, {"status": "completed"})

    with pytest.raises(InvalidStateError):
        await slot_store.cancel_slot(slot.id)


@pytest.mark.asyncio
async def test_cancel_unknown_slot(slot_store):
    with pytest.raises(NotFoundError):
        await slot_store.cancel_slot("missing")


@pytest.mark.asyncio
async def test_range_queries(slot_store):
    first = await slot_store.create_slot(_slot_input(hour=9))
    second = await slot_store.create_slot(_slot_input(hour=14))
    await slot_store.create_slot(_slot_input(day=20))
    await slot_store.book_slot(first.id, CLIENT)

    start, end = datetime(2024, 6, 10), datetime(2024, 6, 10, 23, 59)
    assert [s.id for s in await slot_store.slots_in_range(start, end)] == [first.id, second.id]
    assert [s.id for s in await slot_store.available_slots_in_range(start, end)] == [second.id]
    assert (await slot_store.slot_by_id(second.id)).service == "Coupe"
    assert await slot_store.slot_by_id("missing") is None


@pytest.mark.asyncio
async def test_refresh_and_slots_by_day(slot_store, slots):
    await slots.set(
        "seeded",
        {
            "startDate": datetime(2024, 6, 10, 15, 0),
            "endDate": datetime(2024, 6, 10, 16, 30),
            "status": "available",
            "service": "Coloration",
        },
    )
    await slots.set(
        "early",
        {"startDate": datetime(2024, 6, 10, 9, 0), "endDate": datetime(2024, 6, 10, 10, 0), "status": "booked", "clientName": "Marie"},
    )

    refreshed = await slot_store.refresh()

    assert {s.id for s in refreshed} == {"seeded", "early"}
    assert [s.id for s in slot_store.slots_by_day(date(2024, 6, 10))] == ["early", "seeded"]
    assert slot_store.slots_by_day(date(2024, 6, 11)) == []


def test_default_range_spans_three_months():
    start, end = default_range(datetime(2024, 11, 15, 12, 0))
    assert start == datetime(2024, 11, 1)
    assert end.date() == date(2025, 1, 31)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "broken",
    [
        {"startDate": datetime(2024, 6, 10, 11, 0), "endDate": datetime(2024, 6, 10, 12, 0), "status": "reserved"},
        {"startDate": datetime(2024, 6, 10, 11, 0), "status": "available"},
        {"startDate": datetime(2024, 6, 10, 11, 0), "endDate": datetime(2024, 6, 10, 12, 0), "price": "gratuit"},
    ],
)
async def test_malformed_slots_are_skipped_in_ranges(slot_store, slots, broken):
    good = await slot_store.create_slot(_slot_input())
    await slots.set("bad", broken)

    start, end = datetime(2024, 6, 10), datetime(2024, 6, 10, 23, 59)
    assert [s.id for s in await slot_store.slots_in_range(start, end)] == [good.id]
    assert [s.id for s in await slot_store.refresh(start, end)] == [good.id]

    with pytest.raises(ValidationError):
        await slot_store.slot_by_id("bad")
