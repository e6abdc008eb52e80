from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from salon_agenda.domain.entities.event_type import EventType, SlotStatus


class EventInput(BaseModel):
    title: str = ""
    description: str = ""
    start_date: datetime
    end_date: datetime | None = None  # None: duration comes from the service catalog
    location: str = ""
    color: str | None = None
    event_type: EventType = EventType.professional
    service: str | None = None
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None


class EventPatch(BaseModel):
    """Partial update. Only fields explicitly set by the caller are applied."""

    title: str | None = None
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    location: str | None = None
    color: str | None = None
    event_type: EventType | None = None
    service: str | None = None
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None

    def provided(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ClientData(BaseModel):
    client_name: str
    client_phone: str = ""
    client_email: str = ""


class SlotInput(BaseModel):
    start_date: datetime
    end_date: datetime
    status: SlotStatus | None = None
    service: str | None = None
    price: float | None = Field(default=None, ge=0)
    location: str | None = None
    notes: str | None = None
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None
