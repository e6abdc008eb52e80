from enum import Enum


class EventType(str, Enum):
    professional = "professional"
    personal = "personal"

    @classmethod
    def parse(cls, value: "str | EventType | None") -> "EventType":
        # Legacy bookings carry no eventType and are client appointments
        if value is None or value == "":
            return cls.professional
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class SlotStatus(str, Enum):
    available = "available"
    booked = "booked"
    cancelled = "cancelled"
    completed = "completed"
