"""Chain the services of a multi-service booking into sub-appointments."""

from __future__ import annotations

import datetime as dt
from typing import Any, Mapping, Sequence

from .clock import format_minutes, parse_clock_time
from .models import Booking, BookedService, Service, SubAppointment

DEFAULT_SERVICE_MINUTES = 30


def _start_minutes(start: int | str) -> int:
    if isinstance(start, int):
        return start
    return parse_clock_time(start)


def _service_field(service: Service | Mapping[str, Any], name: str, default: Any = None) -> Any:
    if isinstance(service, Mapping):
        return service.get(name, default)
    return getattr(service, name, default)


def _duration(service: Service | Mapping[str, Any]) -> int:
    value = _service_field(service, "duration")
    return DEFAULT_SERVICE_MINUTES if value is None else int(value)


def sequence_services(
    start: int | str,
    services: Sequence[Service | Mapping[str, Any]],
) -> list[SubAppointment]:
    """Place each service directly after the previous one, in selection order."""

    base = _start_minutes(start)
    cumulative = 0
    appointments = []
    for service in services:
        duration = _duration(service)
        appointments.append(
            SubAppointment(
                service_id=str(_service_field(service, "id", "")),
                start_minutes=base + cumulative,
                duration=duration,
                name=_service_field(service, "name", "") or "",
                staff_id=_service_field(service, "staff_id"),
                price=float(_service_field(service, "price", 0) or 0),
            )
        )
        cumulative += duration
    return appointments


def service_start_time(
    start: int | str | None,
    services: Sequence[Service | Mapping[str, Any]],
    index: int,
) -> str:
    if start is None or start == "":
        return ""
    offset = sum(_duration(service) for service in services[:index])
    return format_minutes(_start_minutes(start) + offset)


def total_duration(services: Sequence[Service | Mapping[str, Any]]) -> int:
    return sum(_duration(service) for service in services)


def total_price(services: Sequence[Service | Mapping[str, Any]]) -> float:
    return round(sum(float(_service_field(service, "price", 0) or 0) for service in services), 2)


def materialize_sub_bookings(booking: Booking) -> list[Booking]:
    """Split a multi-service booking into one booking per service.

    Each sub-booking keeps the parent id for grouping and gets its own
    ``scheduled_on`` offset by the durations of the services before it.
    A booking with fewer than two services is returned unchanged.
    """

    if len(booking.services) < 2:
        return [booking]
    subs = []
    cumulative = 0
    for index, service in enumerate(booking.services):
        duration = DEFAULT_SERVICE_MINUTES if service.duration is None else service.duration
        subs.append(
            booking.with_changes(
                id=f"{booking.id}-{index + 1}",
                parent_id=booking.id,
                scheduled_on=booking.scheduled_on + dt.timedelta(minutes=cumulative),
                duration=duration,
                staff_id=service.staff_id or booking.staff_id,
                services=(service,),
            )
        )
        cumulative += duration
    return subs


def booked_services(appointments: Sequence[SubAppointment]) -> tuple[BookedService, ...]:
    return tuple(
        BookedService(
            service_id=item.service_id,
            staff_id=item.staff_id,
            duration=item.duration,
            name=item.name,
            price=item.price,
        )
        for item in appointments
    )
