from __future__ import annotations

from datetime import datetime

import pytest

from salon_agenda.application.mappers.booking_mapper import BookingMapper
from salon_agenda.application.use_cases.availability_reconciler import AvailabilityReconciler
from salon_agenda.application.use_cases.event_store import EventStore
from salon_agenda.application.use_cases.slot_store import SlotStore
from salon_agenda.infrastructure.clock.system_clock import FixedClock
from salon_agenda.infrastructure.knowledge.service_catalog_store import ServiceCatalogStore
from salon_agenda.infrastructure.store.memory_store import MemoryDocumentCollection


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 6, 10, 8, 0))


@pytest.fixture
def mapper() -> BookingMapper:
    return BookingMapper(ServiceCatalogStore())


@pytest.fixture
def bookings() -> MemoryDocumentCollection:
    return MemoryDocumentCollection("bookings")


@pytest.fixture
def availability() -> MemoryDocumentCollection:
    return MemoryDocumentCollection("availableSlots")


@pytest.fixture
def reconciler(availability, clock) -> AvailabilityReconciler:
    return AvailabilityReconciler(availability, clock)


@pytest.fixture
def event_store(bookings, mapper, reconciler, clock) -> EventStore:
    return EventStore(bookings=bookings, mapper=mapper, reconciler=reconciler, clock=clock)


@pytest.fixture
def slots() -> MemoryDocumentCollection:
    return MemoryDocumentCollection("slots")


@pytest.fixture
def slot_store(slots, clock) -> SlotStore:
    return SlotStore(slots, clock)
