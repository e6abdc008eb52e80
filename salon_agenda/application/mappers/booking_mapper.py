from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Mapping

from salon_agenda.application.dto.event_input import EventInput
from salon_agenda.application.exceptions import ValidationError
from salon_agenda.application.ports.service_catalog import ServiceCatalogPort
from salon_agenda.application.utils.time_utils import (
    combine_day_and_time,
    end_time,
    format_hhmm,
    parse_hhmm,
    start_of_day,
)
from salon_agenda.domain.entities.booking import PERSONAL_SERVICE, TITLE_SEPARATOR, Booking
from salon_agenda.domain.entities.event import Event
from salon_agenda.domain.entities.event_type import EventType

PRIMARY_COLOR = "#8B5FBF"
PERSONAL_COLOR = "#FFCC00"  # amber


class BookingMapper:
    """
    Converts between persisted bookings and display events.

    A booking stores a calendar day plus an "HH:MM" string; the event carries
    full start/end instants, a colour and the client fields. Professional
    bookings are named "<service> - <clientName>" by the write path; the
    mapper never rebuilds that name on read.
    """

    def __init__(self, catalog: ServiceCatalogPort, persist_duration: bool = True) -> None:
        self._catalog = catalog
        self._persist_duration = persist_duration

    def to_event(self, booking: Booking) -> Event:
        event_type = EventType.parse(booking.event_type)
        start = combine_day_and_time(booking.date, booking.time)
        duration = booking.duration_minutes or self._catalog.get_duration_minutes(booking.service)
        is_professional = event_type == EventType.professional

        return Event(
            id=booking.id or "",
            title=booking.name,
            description=booking.message or "",
            start_date=start,
            end_date=end_time(start, duration),
            location=booking.address or "",
            color=self.resolve_color(booking, event_type),
            event_type=event_type,
            service=booking.service if is_professional else None,
            client_name=booking.client_name if is_professional else None,
            client_phone=booking.phone if is_professional else None,
            client_email=booking.email if is_professional else None,
        )

    def resolve_color(self, booking: Booking, event_type: EventType) -> str:
        if booking.color:
            return booking.color
        if event_type == EventType.personal:
            return PERSONAL_COLOR
        return self._catalog.get_color(booking.service) or PRIMARY_COLOR

    def to_booking(self, event_input: EventInput, created_at: datetime | None = None) -> Booking:
        """Build the write payload for an event. Raises ValidationError before anything is written."""
        start = event_input.start_date.replace(second=0, microsecond=0)
        duration_minutes = None
        if event_input.end_date is not None:
            if event_input.end_date <= event_input.start_date:
                raise ValidationError("End date must be after start date.")
            duration_minutes = int((event_input.end_date - start).total_seconds() // 60)
            if duration_minutes < 1:
                raise ValidationError("Event must last at least one minute.")

        if event_input.event_type == EventType.professional:
            client_name = (event_input.client_name or "").strip()
            service = (event_input.service or "").strip()
            if not client_name:
                raise ValidationError("Client name is required for a professional event.")
            if not service:
                raise ValidationError("Service is required for a professional event.")
            name = f"{service}{TITLE_SEPARATOR}{client_name}"
            email = (event_input.client_email or "").strip()
            phone = (event_input.client_phone or "").strip()
        else:
            if not (event_input.title or "").strip():
                raise ValidationError("Title is required for a personal event.")
            name = event_input.title
            service = PERSONAL_SERVICE
            client_name = None
            email = ""
            phone = ""

        return Booking(
            id=None,
            name=name,
            service=service,
            date=start.date(),
            time=format_hhmm(start),
            event_type=event_input.event_type,
            address=event_input.location or "",
            message=event_input.description or "",
            email=email,
            phone=phone,
            status="confirmed",
            created_at=created_at,
            client_name=client_name,
            duration_minutes=duration_minutes if self._persist_duration else None,
            color=event_input.color or None,
        )

    @staticmethod
    def input_from_event(event: Event, keep_end: bool = True) -> EventInput:
        return EventInput(
            title=event.title,
            description=event.description,
            start_date=event.start_date,
            end_date=event.end_date if keep_end else None,
            location=event.location,
            event_type=event.event_type,
            service=event.service,
            client_name=event.client_name,
            client_phone=event.client_phone,
            client_email=event.client_email,
        )


def split_professional_name(name: str) -> tuple[str | None, str | None]:
    """Legacy "<service> - <clientName>" name -> (service, client_name)."""
    service, separator, client_name = (name or "").partition(TITLE_SEPARATOR)
    if not separator:
        return None, None
    return service.strip() or None, client_name.strip() or None


def booking_to_document(booking: Booking) -> dict[str, Any]:
    document: dict[str, Any] = {
        "name": booking.name,
        "service": booking.service,
        "date": start_of_day(booking.date),
        "time": booking.time,
        "address": booking.address,
        "message": booking.message,
        "email": booking.email,
        "phone": booking.phone,
        "status": booking.status,
        "eventType": EventType.parse(booking.event_type).value,
    }
    if booking.created_at is not None:
        document["createdAt"] = booking.created_at
    if booking.client_name:
        document["clientName"] = booking.client_name
    if booking.duration_minutes is not None:
        document["durationMinutes"] = booking.duration_minutes
    if booking.color:
        document["color"] = booking.color
    return document


def booking_from_document(doc_id: str, data: Mapping[str, Any]) -> Booking:
    """
    Adapt a stored booking, including legacy records: missing eventType,
    unpadded "9:30" times, ISO strings for dates and client names only
    present inside the "<service> - <clientName>" name.
    """
    if "date" not in data or "time" not in data:
        raise ValidationError(f"Booking {doc_id} has no date or time.")

    try:
        event_type = EventType.parse(data.get("eventType"))
    except ValueError as e:
        raise ValidationError(f"Booking {doc_id} has unknown eventType {data.get('eventType')!r}.") from e
    hour, minute = parse_hhmm(str(data["time"]))
    name = str(data.get("name") or "")

    client_name = data.get("clientName") or None
    if event_type == EventType.professional and not client_name:
        client_name = split_professional_name(name)[1]

    duration = _coerce_duration(doc_id, data.get("durationMinutes"))
    return Booking(
        id=doc_id,
        name=name,
        service=str(data.get("service") or ""),
        date=_coerce_day(data["date"]),
        time=f"{hour:02d}:{minute:02d}",
        event_type=event_type,
        address=data.get("address") or "",
        message=data.get("message") or "",
        email=data.get("email") or "",
        phone=data.get("phone") or "",
        status=data.get("status") or "confirmed",
        created_at=_coerce_instant(data.get("createdAt")),
        client_name=client_name if event_type == EventType.professional else None,
        duration_minutes=duration,
        color=data.get("color") or None,
    )


def with_id(booking: Booking, doc_id: str) -> Booking:
    return replace(booking, id=doc_id)


def _coerce_day(value: Any) -> date:
    if isinstance(value, datetime):
        return _to_local(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return _to_local(datetime.fromisoformat(value.replace("Z", "+00:00"))).date()
        except ValueError as e:
            raise ValidationError(f"Invalid booking date: {value!r}") from e
    raise ValidationError(f"Invalid booking date: {value!r}")


def _coerce_duration(doc_id: str, value: Any) -> int | None:
    if value in (None, "", 0):
        return None
    try:
        minutes = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Booking {doc_id} has invalid durationMinutes {value!r}.") from e
    if minutes < 1:
        raise ValidationError(f"Booking {doc_id} has invalid durationMinutes {value!r}.")
    return minutes


def _coerce_instant(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return _to_local(value)
    if isinstance(value, str) and value:
        try:
            return _to_local(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def _to_local(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
