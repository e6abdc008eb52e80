from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from salon_agenda.application.dto.event_input import SlotInput
from salon_agenda.application.exceptions import ValidationError
from salon_agenda.domain.entities.event_type import SlotStatus
from salon_agenda.domain.entities.slot import Slot, SlotAvailability

_OPTIONAL_FIELDS = (
    ("service", "service"),
    ("price", "price"),
    ("location", "location"),
    ("notes", "notes"),
    ("client_name", "clientName"),
    ("client_phone", "clientPhone"),
    ("client_email", "clientEmail"),
)


def slot_input_to_document(slot_input: SlotInput, status: SlotStatus, now: datetime) -> dict[str, Any]:
    document: dict[str, Any] = {
        "startDate": slot_input.start_date,
        "endDate": slot_input.end_date,
        "status": status.value,
        "createdAt": now,
        "updatedAt": now,
    }
    for attr, key in _OPTIONAL_FIELDS:
        value = getattr(slot_input, attr)
        if value is not None:
            document[key] = value
    return document


def slot_from_document(doc_id: str, data: Mapping[str, Any]) -> Slot:
    start, end = data.get("startDate"), data.get("endDate")
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        raise ValidationError(f"Slot {doc_id} has no valid startDate or endDate.")
    try:
        status = SlotStatus(data.get("status") or SlotStatus.available.value)
    except ValueError as e:
        raise ValidationError(f"Slot {doc_id} has unknown status {data.get('status')!r}.") from e
    try:
        price = float(data["price"]) if data.get("price") is not None else None
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Slot {doc_id} has invalid price {data.get('price')!r}.") from e

    return Slot(
        id=doc_id,
        start_date=start,
        end_date=end,
        status=status,
        service=data.get("service"),
        price=price,
        location=data.get("location"),
        notes=data.get("notes"),
        client_name=data.get("clientName"),
        client_phone=data.get("clientPhone"),
        client_email=data.get("clientEmail"),
        created_at=data.get("createdAt"),
        updated_at=data.get("updatedAt"),
    )


def availability_from_document(doc_id: str, data: Mapping[str, Any]) -> SlotAvailability:
    return SlotAvailability(
        id=doc_id,
        date=str(data.get("date") or ""),
        time=str(data.get("time") or ""),
        is_available=bool(data.get("isAvailable", True)),
        last_updated=data.get("lastUpdated"),
    )
