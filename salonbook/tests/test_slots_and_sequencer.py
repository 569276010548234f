import datetime as dt
import unittest

from salonbook.scheduling.hours import resolve_opening_hours
from salonbook.scheduling.models import BookedService, Booking, OpenInterval, Service
from salonbook.scheduling.sequencer import (
    materialize_sub_bookings,
    sequence_services,
    service_start_time,
    total_duration,
    total_price,
)
from salonbook.scheduling.slots import (
    generate_slots,
    hour_markers,
    month_grid,
    narrow_to,
    slot_labels,
    week_dates,
)


class SlotGeneratorTestCase(unittest.TestCase):
    def test_slots_stay_inside_open_interval(self) -> None:
        interval = OpenInterval(start="9:00 am", end="5:00 pm")
        slots = generate_slots(interval)
        starts = [slot.start_minutes for slot in slots]
        self.assertEqual(starts[0], 540)
        self.assertEqual(starts[-1], 1005)
        self.assertEqual(len(starts), 32)
        self.assertTrue(all(540 <= minute < 1020 for minute in starts))
        self.assertEqual(len(set(starts)), len(starts))
        self.assertTrue(all(b - a == 15 for a, b in zip(starts, starts[1:])))

    def test_uneven_close_is_exclusive(self) -> None:
        slots = generate_slots(OpenInterval(start="10:00 am", end="11:10 am"))
        self.assertEqual(slot_labels(slots), ["10:00 am", "10:15 am", "10:30 am", "10:45 am", "11:00 am"])

    def test_closed_day_has_no_slots(self) -> None:
        sunday = dt.date(2025, 11, 30)
        interval = resolve_opening_hours([{"day": "Mon - Sat", "from": "09:00", "to": "17:00"}], sunday)
        self.assertIsNone(interval)
        self.assertEqual(generate_slots(interval), [])

    def test_invalid_step(self) -> None:
        with self.assertRaises(ValueError):
            generate_slots(OpenInterval(start="9:00 am", end="5:00 pm"), step=0)

    def test_narrow_to_working_hours(self) -> None:
        opening = OpenInterval(start="9:00 am", end="5:00 pm")
        self.assertEqual(narrow_to(opening, OpenInterval(start="8:00 am", end="1:00 pm")).end, "1:00 pm")
        self.assertIs(narrow_to(opening, None), opening)
        self.assertIsNone(narrow_to(opening, OpenInterval(start="6:00 pm", end="8:00 pm")))

    def test_hour_markers_cover_business_window(self) -> None:
        markers = hour_markers()
        self.assertEqual(len(markers), 12)
        self.assertEqual(markers[0]["time"], "08:00")
        self.assertEqual(markers[-1]["label"], "7:00 pm")

    def test_month_grid_starts_on_sunday(self) -> None:
        grid = month_grid(2025, 11)
        # 1 November 2025 is a Saturday.
        self.assertEqual(grid[:6], [None] * 6)
        self.assertEqual(grid[6], dt.date(2025, 11, 1))
        self.assertEqual(grid[-1], dt.date(2025, 11, 30))

    def test_week_dates(self) -> None:
        week = week_dates(dt.date(2025, 11, 26))
        self.assertEqual(week[0], dt.date(2025, 11, 23))
        self.assertEqual(week[-1], dt.date(2025, 11, 29))


class SequencerTestCase(unittest.TestCase):
    def test_single_service(self) -> None:
        (appointment,) = sequence_services("2:00 pm", [Service(id="cut", duration=45)])
        self.assertEqual(appointment.as_dict()["start"], "2:00 pm")
        self.assertEqual(appointment.as_dict()["end"], "2:45 pm")

    def test_multi_service_chaining(self) -> None:
        services = [
            {"id": "wash", "duration": 30, "price": 15},
            {"id": "cut", "duration": 45, "price": 40},
            {"id": "blowout", "duration": 20, "price": 25.5},
        ]
        appointments = sequence_services("10:00 am", services)
        self.assertEqual(
            [item.as_dict()["start"] for item in appointments],
            ["10:00 am", "10:30 am", "11:15 am"],
        )
        self.assertEqual(appointments[-1].as_dict()["end"], "11:35 am")
        self.assertEqual(total_duration(services), 95)
        self.assertEqual(total_price(services), 80.5)

    def test_additivity_and_order(self) -> None:
        durations = [20, 60, 15, 45]
        services = [Service(id=str(index), duration=value) for index, value in enumerate(durations)]
        appointments = sequence_services(600, services)
        for index, item in enumerate(appointments):
            self.assertEqual(item.service_id, str(index))
            self.assertEqual(item.start_minutes, 600 + sum(durations[:index]))
        self.assertEqual(appointments[-1].end_minutes, 600 + sum(durations))

    def test_service_start_time(self) -> None:
        services = [Service(id="a", duration=30), Service(id="b", duration=45)]
        self.assertEqual(service_start_time("10:00 am", services, 1), "10:30 am")
        self.assertEqual(service_start_time("", services, 1), "")
        self.assertEqual(service_start_time(0, services, 2), "1:15 am")
        self.assertEqual(service_start_time(0, services, 0), "12:00 am")

    def test_materialize_sub_bookings(self) -> None:
        booking = Booking(
            id="B7",
            scheduled_on=dt.datetime(2025, 11, 24, 10, 0),
            duration=75,
            staff_id="s1",
            services=(
                BookedService(service_id="wash", duration=30),
                BookedService(service_id="cut", staff_id="s2", duration=45),
            ),
        )
        subs = materialize_sub_bookings(booking)
        self.assertEqual([sub.parent_id for sub in subs], ["B7", "B7"])
        self.assertEqual(subs[1].scheduled_on, dt.datetime(2025, 11, 24, 10, 30))
        self.assertEqual([sub.duration for sub in subs], [30, 45])
        self.assertEqual([sub.staff_id for sub in subs], ["s1", "s2"])
        self.assertEqual(len({sub.id for sub in subs}), 2)

    def test_single_service_booking_is_not_split(self) -> None:
        booking = Booking(id="B1", scheduled_on=dt.datetime(2025, 11, 24, 9, 0), duration=30)
        self.assertEqual(materialize_sub_bookings(booking), [booking])


if __name__ == "__main__":
    unittest.main()
