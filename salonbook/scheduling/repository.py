"""In-memory cache of the data the scheduling engine reads."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Iterable, Mapping

from .clock import date_key
from .models import Booking, Service

logger = logging.getLogger(__name__)


class ScheduleRepository:
    """Holds branch opening hours, the staff roster, services and bookings.

    Opening hours, staff and services belong to one branch and are dropped
    whenever a different branch is selected or ``invalidate`` is called.
    Bookings are stored per date and each fetch replaces the date's list.
    """

    def __init__(self, branch_id: str | None = None) -> None:
        self.branch_id = branch_id
        self._opening_hours: list[Any] | Mapping[str, Any] = []
        self._staff: dict[str, dict] = {}
        self._services: dict[str, Service] = {}
        self._bookings: dict[str, list[Booking]] = {}
        self._load_generation = 0

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------
    def begin_load(self) -> int:
        """Start a booking load; any load started earlier becomes stale."""

        self._load_generation += 1
        return self._load_generation

    def is_current(self, generation: int) -> bool:
        return generation == self._load_generation

    def select_branch(self, branch_id: str | None) -> bool:
        """Switch branch; returns ``True`` when cached data was dropped."""

        branch_id = None if branch_id is None else str(branch_id)
        if branch_id == self.branch_id:
            return False
        logger.info("Branch changed from %s to %s, clearing schedule cache", self.branch_id, branch_id)
        self.branch_id = branch_id
        self.invalidate()
        return True

    def invalidate(self) -> None:
        # Loads still in flight belong to the old data set.
        self._load_generation += 1
        self._opening_hours = []
        self._staff.clear()
        self._services.clear()
        self._bookings.clear()

    # ------------------------------------------------------------------
    # Branch and staff
    # ------------------------------------------------------------------
    def set_opening_hours(self, entries: list[Any] | Mapping[str, Any] | None) -> None:
        self._opening_hours = entries or []

    @property
    def opening_hours(self) -> list[Any] | Mapping[str, Any]:
        return self._opening_hours

    def set_staff(self, members: Iterable[Mapping[str, Any]]) -> None:
        roster = {}
        for member in members:
            staff_id = member.get("id", member.get("staff_id"))
            if staff_id is None:
                continue
            roster[str(staff_id)] = {
                "id": str(staff_id),
                "name": member.get("name") or " ".join(
                    part for part in (member.get("first_name"), member.get("last_name")) if part
                ),
                "working_hours": list(member.get("working_hours") or member.get("workingHours") or []),
            }
        self._staff = roster

    def list_staff(self) -> list[dict]:
        return list(self._staff.values())

    def get_staff(self, staff_id: str) -> dict | None:
        return self._staff.get(str(staff_id))

    def working_hours(self, staff_id: str) -> list[dict]:
        member = self.get_staff(staff_id)
        return member["working_hours"] if member else []

    def set_services(self, services: Iterable[Service]) -> None:
        self._services = {service.id: service for service in services}

    def get_service(self, service_id: str) -> Service | None:
        return self._services.get(str(service_id))

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------
    def replace_bookings(self, day: dt.date, bookings: Iterable[Booking]) -> None:
        self._bookings[date_key(day)] = list(bookings)

    def has_bookings_for(self, day: dt.date) -> bool:
        return date_key(day) in self._bookings

    def bookings_for(self, day: dt.date, *, staff_id: str | None = None) -> list[Booking]:
        rows = self._bookings.get(date_key(day), [])
        if staff_id is None:
            return list(rows)
        return [booking for booking in rows if booking.staff_id == str(staff_id)]
