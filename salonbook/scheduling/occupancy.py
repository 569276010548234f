"""Occupancy queries over a staff member's bookings for one day.

All ranges are half-open, so a booking ending at 10:30 never blocks a new
booking that starts at 10:30.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, Sequence

from .models import Booking, BookingStatus, OccupiedRange, TimeSlot

HOUR_MINUTES = 60


def occupied_ranges(
    bookings: Iterable[Booking],
    *,
    staff_id: str | None = None,
    day: dt.date | None = None,
) -> list[OccupiedRange]:
    ranges = []
    for booking in bookings:
        if booking.status is BookingStatus.CANCELLED:
            continue
        if staff_id is not None and str(booking.staff_id) != str(staff_id):
            continue
        if day is not None and booking.day != day:
            continue
        ranges.append(
            OccupiedRange(
                start_minutes=booking.start_minutes,
                end_minutes=booking.end_minutes,
                booking_id=booking.parent_id or booking.id,
            )
        )
    return ranges


def bookings_starting_in(
    bookings: Iterable[Booking], window_start: int, window_end: int | None = None
) -> list[Booking]:
    """Bookings whose start minute lies in ``[window_start, window_end)``.

    Used to render each card in exactly one hour row, even when it runs on
    into the next hour.
    """

    if window_end is None:
        window_end = window_start + HOUR_MINUTES
    return [booking for booking in bookings if window_start <= booking.start_minutes < window_end]


def intersects_window(occupied: OccupiedRange, window_start: int, window_end: int) -> bool:
    starts_within = window_start <= occupied.start_minutes < window_end
    ends_within = window_start < occupied.end_minutes <= window_end
    spans = occupied.start_minutes <= window_start and occupied.end_minutes >= window_end
    return starts_within or ends_within or spans


def is_occupied(
    minute: int,
    ranges: Iterable[OccupiedRange],
    window: tuple[int, int] | None = None,
) -> bool:
    for occupied in ranges:
        if window is not None and not intersects_window(occupied, *window):
            continue
        if occupied.contains(minute):
            return True
    return False


def conflicts(start: int, duration: int, ranges: Iterable[OccupiedRange]) -> list[OccupiedRange]:
    """Ranges overlapping a candidate booking ``[start, start + duration)``."""

    end = start + max(duration, 1)
    return [occupied for occupied in ranges if occupied.start_minutes < end and start < occupied.end_minutes]


def free_slots(
    slots: Sequence[TimeSlot],
    ranges: Sequence[OccupiedRange],
    *,
    duration: int | None = None,
) -> list[TimeSlot]:
    """Drop slots that are already taken.

    Without ``duration`` a slot is dropped when its start minute is occupied;
    with it, when any part of the candidate booking would overlap.
    """

    if not ranges:
        return list(slots)
    if duration is None:
        return [slot for slot in slots if not is_occupied(slot.start_minutes, ranges)]
    return [slot for slot in slots if not conflicts(slot.start_minutes, duration, ranges)]
