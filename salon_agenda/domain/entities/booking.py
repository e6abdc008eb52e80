from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from salon_agenda.domain.entities.event_type import EventType

PERSONAL_SERVICE = "Personnel"  # service sentinel stored on personal bookings
TITLE_SEPARATOR = " - "  # professional names are "<service> - <clientName>"


@dataclass(frozen=True)
class Booking:
    id: str | None
    name: str
    service: str
    date: date
    time: str  # "HH:MM", 24h, zero-padded
    event_type: EventType = EventType.professional
    address: str = ""
    message: str = ""
    email: str = ""
    phone: str = ""
    status: str = "confirmed"
    created_at: datetime | None = None
    client_name: str | None = None  # explicit; legacy records derive it from name
    duration_minutes: int | None = None  # absent on legacy records
    color: str | None = None
