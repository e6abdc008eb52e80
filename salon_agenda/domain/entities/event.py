from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from salon_agenda.domain.entities.event_type import EventType


@dataclass(frozen=True)
class Event:
    id: str
    title: str
    start_date: datetime
    end_date: datetime
    event_type: EventType = EventType.professional
    description: str = ""
    location: str = ""
    color: str | None = None
    # professional events only
    service: str | None = None
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None

    @property
    def duration_minutes(self) -> int:
        return int((self.end_date - self.start_date).total_seconds() // 60)

    def as_dict(self) -> dict[str, Any]:
        """Display payload with ISO 8601 instants, keyed the way the UI expects."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "location": self.location,
            "color": self.color,
            "eventType": self.event_type.value,
            "service": self.service,
            "clientName": self.client_name,
            "clientPhone": self.client_phone,
            "clientEmail": self.client_email,
        }
