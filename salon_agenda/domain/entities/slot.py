from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from salon_agenda.domain.entities.event_type import SlotStatus


@dataclass(frozen=True)
class Slot:
    id: str
    start_date: datetime
    end_date: datetime
    status: SlotStatus = SlotStatus.available
    service: str | None = None
    price: float | None = None
    location: str | None = None
    notes: str | None = None
    # set once booked, kept after cancellation
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_available(self) -> bool:
        return self.status == SlotStatus.available


@dataclass(frozen=True)
class SlotAvailability:
    id: str  # "YYYY-MM-DD_HHMM"
    date: str  # "YYYY-MM-DD"
    time: str  # "HH:MM"
    is_available: bool
    last_updated: datetime | None = None
