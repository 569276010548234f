"""Bookable time-slot grids and calendar cell markers."""

from __future__ import annotations

import calendar
import datetime as dt
from typing import Iterable

from .clock import format_minutes, parse_clock_time, to_24_hour
from .models import OpenInterval, TimeSlot

SLOT_STEP_MINUTES = 15
BUSINESS_WINDOW = ("08:00", "20:00")


def generate_slots(interval: OpenInterval | None, step: int = SLOT_STEP_MINUTES) -> list[TimeSlot]:
    """Return slot starts ``start, start + step, ...`` strictly before the close.

    A closed day (``interval is None``) has no slots at all; callers should
    show it as closed rather than as an empty grid.
    """

    if interval is None:
        return []
    if step <= 0:
        raise ValueError("Slot step must be a positive number of minutes")
    start, end = interval.start_minutes, interval.end_minutes
    return [TimeSlot(start_minutes=minute, duration_minutes=step) for minute in range(start, end, step)]


def slot_labels(slots: Iterable[TimeSlot]) -> list[str]:
    return [slot.label for slot in slots]


def narrow_to(interval: OpenInterval | None, inner: OpenInterval | None) -> OpenInterval | None:
    """Intersect two open intervals; ``inner = None`` leaves ``interval`` as is."""

    if interval is None or inner is None:
        return interval
    start = max(interval.start_minutes, inner.start_minutes)
    end = min(interval.end_minutes, inner.end_minutes)
    if end <= start:
        return None
    return OpenInterval(start=format_minutes(start), end=format_minutes(end))


def hour_markers(start: str = BUSINESS_WINDOW[0], end: str = BUSINESS_WINDOW[1]) -> list[dict]:
    """Hour cells for the week and month views, independent of the slot grid."""

    first = parse_clock_time(start) // 60 * 60
    last = parse_clock_time(end)
    return [
        {"start_minutes": minute, "label": format_minutes(minute), "time": to_24_hour(minute)}
        for minute in range(first, last, 60)
    ]


def month_grid(year: int, month: int) -> list[dt.date | None]:
    """Days of a month padded with leading blanks so weeks start on Sunday."""

    first = dt.date(year, month, 1)
    leading = (first.weekday() + 1) % 7
    days_in_month = calendar.monthrange(year, month)[1]
    return [None] * leading + [dt.date(year, month, day) for day in range(1, days_in_month + 1)]


def week_dates(anchor: dt.date) -> list[dt.date]:
    """Sunday-to-Saturday week containing ``anchor``."""

    sunday = anchor - dt.timedelta(days=(anchor.weekday() + 1) % 7)
    return [sunday + dt.timedelta(days=offset) for offset in range(7)]
