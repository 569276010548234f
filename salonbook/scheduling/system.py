"""High level scheduling operations for the salon booking platform."""

from __future__ import annotations

import datetime as dt
import logging
from collections import defaultdict
from typing import Any, Iterable, Mapping, Sequence

from salonbook.settings import Settings

from .clock import date_key, format_minutes, parse_clock_time, parse_date_key
from .hours import resolve_opening_hours, working_interval, works_on
from .layout import layout_day
from .models import Booking, OccupiedRange, OpenInterval, Service
from .occupancy import conflicts, free_slots, occupied_ranges
from .repository import ScheduleRepository
from .sequencer import materialize_sub_bookings, sequence_services, total_duration, total_price
from .slots import generate_slots, hour_markers, month_grid, narrow_to, slot_labels

logger = logging.getLogger(__name__)


class ValidationError(RuntimeError):
    """Raised when incoming data fails validation."""


class SchedulingSystem:
    """Façade combining the resolvers, slot grid, sequencer and layout engine."""

    def __init__(
        self,
        repository: ScheduleRepository | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.repository = repository or ScheduleRepository()
        self.settings = settings or Settings()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _require_day(self, value: Any) -> dt.date:
        day = parse_date_key(value)
        if day is None:
            raise ValidationError("A valid date (YYYY-MM-DD) is required")
        return day

    def _require_staff(self, staff_id: str) -> dict | None:
        """Return the roster entry, or ``None`` when no roster is loaded."""

        if not self.repository.list_staff():
            return None
        member = self.repository.get_staff(staff_id)
        if member is None:
            raise ValidationError("Staff member not found")
        return member

    def _resolve_service(self, item: Any) -> Service:
        if isinstance(item, Service):
            return item
        if isinstance(item, Mapping):
            service_id = str(item.get("id", item.get("service_id", "")))
            known = self.repository.get_service(service_id)
            duration = item.get("duration", known.duration if known else None)
            if duration is None:
                raise ValidationError(f"Service {service_id or '?'} has no duration")
            try:
                duration = int(duration)
                price = float(item.get("price", known.price if known else 0) or 0)
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"Service {service_id} has an invalid duration or price") from exc
            return Service(
                id=service_id,
                name=item.get("name") or (known.name if known else ""),
                duration=duration,
                price=price,
                staff_id=item.get("staff_id") or item.get("teamMember"),
            )
        known = self.repository.get_service(str(item))
        if known is None:
            raise ValidationError(f"Unknown service {item}")
        return known

    def _bookings_for(self, day: dt.date, staff_id: str | None = None) -> list[Booking]:
        """Bookings of a date split per service, then filtered by who performs them."""

        bookings: list[Booking] = []
        for booking in self.repository.bookings_for(day):
            bookings.extend(materialize_sub_bookings(booking))
        if staff_id is None:
            return bookings
        return [booking for booking in bookings if booking.staff_id == str(staff_id)]

    def _ranges_for(self, day: dt.date, staff_id: str) -> list:
        return occupied_ranges(self._bookings_for(day, staff_id), day=day)

    @staticmethod
    def _booking_ids(ranges: Iterable[OccupiedRange]) -> list[str]:
        return list(dict.fromkeys(occupied.booking_id for occupied in ranges))

    def _working_staff(self, day: dt.date) -> list[dict]:
        return [
            member for member in self.repository.list_staff() if works_on(member["working_hours"], day)
        ]

    # ------------------------------------------------------------------
    # Opening and working hours
    # ------------------------------------------------------------------
    def opening_hours(self, day: Any) -> OpenInterval | None:
        return resolve_opening_hours(
            self.repository.opening_hours,
            self._require_day(day),
            wrap_ranges=self.settings.WRAP_DAY_RANGES,
        )

    def staff_available(self, *, staff_id: str, day: Any) -> bool:
        target = self._require_day(day)
        member = self._require_staff(staff_id)
        return works_on(member["working_hours"] if member else None, target)

    # ------------------------------------------------------------------
    # Slots and conflicts
    # ------------------------------------------------------------------
    def available_slots(
        self,
        *,
        day: Any,
        staff_id: str | None = None,
        duration: int | None = None,
    ) -> dict:
        """Bookable slot labels for a date, optionally for one staff member.

        Without ``staff_id`` a slot is offered when any working member is
        free at that time.
        """

        target = self._require_day(day)
        if duration is not None and duration <= 0:
            raise ValidationError("Duration must be a positive number of minutes")
        interval = self.opening_hours(target)
        result = {
            "date": date_key(target),
            "closed": interval is None,
            "opening_hours": interval.as_dict() if interval else None,
            "staff_working": True,
            "slots": [],
        }
        if interval is None:
            return result
        step = self.settings.SLOT_STEP_MINUTES

        if staff_id is not None:
            member = self._require_staff(staff_id)
            hours = member["working_hours"] if member else None
            if not works_on(hours, target):
                result["staff_working"] = False
                return result
            slots = generate_slots(narrow_to(interval, working_interval(hours, target)), step)
            result["slots"] = slot_labels(free_slots(slots, self._ranges_for(target, staff_id), duration=duration))
            return result

        slots = generate_slots(interval, step)
        members = self._working_staff(target)
        if not self.repository.list_staff():
            result["slots"] = slot_labels(slots)
            return result
        offered = set()
        for member in members:
            own = generate_slots(narrow_to(interval, working_interval(member["working_hours"], target)), step)
            free = free_slots(own, self._ranges_for(target, member["id"]), duration=duration)
            offered.update(slot.start_minutes for slot in free)
        result["staff_working"] = bool(members)
        result["slots"] = slot_labels(slot for slot in slots if slot.start_minutes in offered)
        return result

    def check_conflict(self, *, day: Any, staff_id: str, start: str, duration: int) -> dict:
        target = self._require_day(day)
        if duration <= 0:
            raise ValidationError("Duration must be a positive number of minutes")
        self._require_staff(staff_id)
        start_minutes = parse_clock_time(start)
        clashes = conflicts(start_minutes, duration, self._ranges_for(target, staff_id))
        return {
            "date": date_key(target),
            "staff_id": str(staff_id),
            "start": format_minutes(start_minutes),
            "end": format_minutes(start_minutes + duration),
            "conflict": bool(clashes),
            "conflicting_booking_ids": self._booking_ids(clashes),
        }

    # ------------------------------------------------------------------
    # Multi-service booking plans
    # ------------------------------------------------------------------
    def plan_booking(
        self,
        *,
        start: str,
        services: Sequence[Any],
        day: Any = None,
        staff_id: str | None = None,
    ) -> dict:
        """Sequence the selected services back to back from ``start``."""

        if not services:
            raise ValidationError("At least one service must be selected")
        resolved = [self._resolve_service(item) for item in services]
        if any(service.duration <= 0 for service in resolved):
            raise ValidationError("Service durations must be positive")
        appointments = sequence_services(start, resolved)
        begin = appointments[0].start_minutes
        plan = {
            "start": format_minutes(begin),
            "end": format_minutes(begin + total_duration(resolved)),
            "total_duration": total_duration(resolved),
            "total_price": total_price(resolved),
            "appointments": [item.as_dict() for item in appointments],
        }
        if day is not None:
            target = self._require_day(day)
            clashes = []
            for item in appointments:
                member_id = item.staff_id or staff_id
                if member_id is None:
                    continue
                found = conflicts(item.start_minutes, item.duration, self._ranges_for(target, member_id))
                clashes.extend(found)
            plan["date"] = date_key(target)
            plan["conflicting_booking_ids"] = self._booking_ids(clashes)
        return plan

    # ------------------------------------------------------------------
    # Calendar views
    # ------------------------------------------------------------------
    def hour_markers(self) -> list[dict]:
        return hour_markers(self.settings.BUSINESS_DAY_START, self.settings.BUSINESS_DAY_END)

    def day_view(self, *, day: Any, staff_id: str | None = None) -> dict:
        target = self._require_day(day)
        bookings = self._bookings_for(target, staff_id)
        interval = self.opening_hours(target)
        cells = layout_day(bookings, [marker["start_minutes"] for marker in self.hour_markers()])
        return {
            "date": date_key(target),
            "closed": interval is None,
            "opening_hours": interval.as_dict() if interval else None,
            "cells": cells,
            "bookings": [booking.as_dict() for booking in bookings],
        }

    def month_view(self, *, year: int, month: int) -> dict:
        try:
            grid = month_grid(year, month)
        except ValueError as exc:
            raise ValidationError("Invalid year or month") from exc
        counts: dict[str, int] = defaultdict(int)
        for cell in grid:
            if cell is None:
                continue
            counts[date_key(cell)] = len(self.repository.bookings_for(cell))
        return {
            "year": year,
            "month": month,
            "days": [
                None
                if cell is None
                else {
                    "date": date_key(cell),
                    "open": resolve_opening_hours(
                        self.repository.opening_hours, cell, wrap_ranges=self.settings.WRAP_DAY_RANGES
                    )
                    is not None,
                    "bookings": counts[date_key(cell)],
                }
                for cell in grid
            ],
        }
