"""Plain data types exchanged between the scheduling components."""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass, field, replace
from typing import Any

from .clock import format_minutes, minutes_of, parse_clock_time


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    STARTED = "Started"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "NoShow"

    @classmethod
    def coerce(cls, value: Any) -> "BookingStatus":
        """Map loosely spelled API values (``"no_show"``, ``"confirmed"``) to a member."""

        if isinstance(value, cls):
            return value
        text = "".join(ch for ch in str(value or "") if ch.isalnum()).lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        if text in ("canceled", "declined"):
            return cls.CANCELLED
        if text in ("approved", "booked"):
            return cls.CONFIRMED
        return cls.PENDING


@dataclass(frozen=True)
class OpenInterval:
    """An open period of a day, held as 12-hour display strings."""

    start: str
    end: str

    @property
    def start_minutes(self) -> int:
        return parse_clock_time(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_clock_time(self.end)

    def as_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class TimeSlot:
    start_minutes: int
    duration_minutes: int

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @property
    def label(self) -> str:
        return format_minutes(self.start_minutes)


@dataclass(frozen=True)
class OccupiedRange:
    """Half-open ``[start_minutes, end_minutes)`` consumed by a booking."""

    start_minutes: int
    end_minutes: int
    booking_id: str | None = None

    def contains(self, minute: int) -> bool:
        return self.start_minutes <= minute < self.end_minutes


@dataclass(frozen=True)
class Service:
    id: str
    name: str = ""
    duration: int = 0
    price: float = 0.0
    staff_ids: tuple[str, ...] = ()
    staff_id: str | None = None


@dataclass(frozen=True)
class BookedService:
    service_id: str
    staff_id: str | None = None
    duration: int | None = None
    name: str = ""
    price: float = 0.0


@dataclass(frozen=True)
class Booking:
    id: str
    scheduled_on: dt.datetime
    duration: int
    staff_id: str | None = None
    customer_id: str | None = None
    customer_name: str = ""
    staff_name: str = ""
    services: tuple[BookedService, ...] = ()
    status: BookingStatus = BookingStatus.PENDING
    parent_id: str | None = None
    extra: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def start_minutes(self) -> int:
        return minutes_of(self.scheduled_on)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration

    @property
    def day(self) -> dt.date:
        return self.scheduled_on.date()

    def with_changes(self, **changes: Any) -> "Booking":
        return replace(self, **changes)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "scheduled_on": self.scheduled_on.strftime("%Y-%m-%d %H:%M:%S"),
            "start": format_minutes(self.start_minutes),
            "end": format_minutes(self.end_minutes),
            "duration": self.duration,
            "status": self.status.value,
            "services": [
                {
                    "service_id": svc.service_id,
                    "staff_id": svc.staff_id,
                    "duration": svc.duration,
                    "name": svc.name,
                }
                for svc in self.services
            ],
        }


@dataclass(frozen=True)
class SubAppointment:
    service_id: str
    start_minutes: int
    duration: int
    name: str = ""
    staff_id: str | None = None
    price: float = 0.0

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration

    def as_dict(self) -> dict:
        return {
            "service_id": self.service_id,
            "name": self.name,
            "staff_id": self.staff_id,
            "start": format_minutes(self.start_minutes),
            "end": format_minutes(self.end_minutes),
            "duration": self.duration,
            "price": self.price,
        }


@dataclass(frozen=True)
class CardGeometry:
    booking_id: str
    top_percent: float
    height_percent: float
    z_index: int

    def as_dict(self) -> dict:
        return {
            "booking_id": self.booking_id,
            "top_percent": round(self.top_percent, 2),
            "height_percent": round(self.height_percent, 2),
            "z_index": self.z_index,
        }
