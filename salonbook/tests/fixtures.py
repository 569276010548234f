"""Shared sample branch data for the scheduling tests."""

import datetime as dt

from salonbook.scheduling.ingest import normalize_bookings
from salonbook.scheduling.models import Service
from salonbook.scheduling.repository import ScheduleRepository

MONDAY = dt.date(2025, 11, 24)
FRIDAY = dt.date(2025, 11, 28)
SUNDAY = dt.date(2025, 11, 30)


def seed_repository() -> ScheduleRepository:
    repository = ScheduleRepository(branch_id="b1")
    repository.set_opening_hours(
        [
            {"day": "Monday - Friday", "from": "09:00", "to": "17:00"},
            {"day": "Saturday", "from": "10:00 am", "to": "2:00 pm"},
        ]
    )
    repository.set_staff(
        [
            {
                "id": "s1",
                "name": "Karen Taylor",
                "working_hours": [
                    {"day": 1, "start_time": "09:00:00", "end_time": "17:00:00", "is_working": True},
                    {"day": 6, "start_time": "09:00:00", "end_time": "17:00:00", "is_working": True},
                ],
            },
            {"id": "s2", "first_name": "Sarah", "last_name": "Johnson", "working_hours": []},
        ]
    )
    repository.set_services(
        [
            Service(id="wash", name="Brushing", duration=30, price=20.0),
            Service(id="cut", name="Haircut", duration=45, price=35.0),
            Service(id="facial", name="Facial", duration=20, price=25.0),
        ]
    )
    repository.replace_bookings(
        MONDAY,
        normalize_bookings(
            [
                {"id": "B1", "scheduledOn": "2025-11-24 10:00:00", "staff_id": "s1", "duration": 30, "status": "confirmed"},
                {
                    "id": "B2",
                    "scheduled_on": "2025-11-24 14:00:00",
                    "staff": {"id": "s1", "name": "Karen Taylor"},
                    "services": [
                        {"service_id": "wash", "staff_id": "s1", "duration": 30},
                        {"service_id": "cut", "staff_id": "s1", "duration": 45},
                    ],
                    "status": "pending",
                },
                {"id": "B3", "scheduledOn": "2025-11-24 11:00:00", "staff_id": "s1", "duration": 30, "status": "cancelled"},
                {"id": "B4", "scheduledOn": "2025-11-24 10:00:00", "staff_id": "s2", "duration": 60, "status": "confirmed"},
            ]
        ),
    )
    return repository
