import datetime as dt
import unittest

from salonbook.scheduling.ingest import (
    extract_booking_rows,
    extract_collection,
    normalize_booking,
    normalize_bookings,
)
from salonbook.scheduling.models import BookingStatus


class NormalizeBookingTestCase(unittest.TestCase):
    def test_camel_case_booking(self) -> None:
        booking = normalize_booking(
            {
                "bookingId": 42,
                "scheduledOn": "2025-11-24 14:00:00",
                "staff": {"id": 7, "name": "Karen Taylor"},
                "customer": {"id": 3, "name": "Sophia Davis"},
                "duration": 45,
                "status": "Confirmed",
                "payment": "Paid",
            }
        )
        self.assertEqual(booking.id, "42")
        self.assertEqual(booking.scheduled_on, dt.datetime(2025, 11, 24, 14, 0))
        self.assertEqual(booking.staff_id, "7")
        self.assertEqual(booking.staff_name, "Karen Taylor")
        self.assertEqual(booking.customer_id, "3")
        self.assertEqual(booking.customer_name, "Sophia Davis")
        self.assertEqual(booking.duration, 45)
        self.assertIs(booking.status, BookingStatus.CONFIRMED)
        self.assertEqual(booking.extra["payment"], "Paid")

    def test_snake_case_pending_booking(self) -> None:
        booking = normalize_booking(
            {
                "id": 9,
                "customer_id": 11,
                "customer": {"id": 11, "first_name": "John", "last_name": "Smith"},
                "services": [
                    {"service_id": "1", "staff_id": "2"},
                    {"service_id": "4", "staff_id": "2", "duration": 45},
                ],
                "date": "2025-11-22 12:26:00",
                "status": "pending",
            }
        )
        self.assertEqual(booking.customer_name, "John Smith")
        self.assertEqual(booking.staff_id, "2")
        # A service without a duration counts as thirty minutes.
        self.assertEqual(booking.duration, 75)
        self.assertEqual([svc.service_id for svc in booking.services], ["1", "4"])
        self.assertIs(booking.status, BookingStatus.PENDING)

    def test_field_priority(self) -> None:
        booking = normalize_booking(
            {
                "id": "A",
                "booking_id": "B",
                "scheduledOn": "2025-11-24 09:00:00",
                "date": "2025-11-25 10:00:00",
                "staff_id": "s1",
                "staff": {"id": "s2"},
                "customer_name": "Walk-in",
            }
        )
        self.assertEqual(booking.id, "A")
        self.assertEqual(booking.scheduled_on.day, 24)
        self.assertEqual(booking.staff_id, "s1")
        self.assertEqual(booking.customer_name, "Walk-in")
        self.assertEqual(booking.duration, 30)

    def test_status_spellings(self) -> None:
        self.assertIs(BookingStatus.coerce("no_show"), BookingStatus.NO_SHOW)
        self.assertIs(BookingStatus.coerce("CANCELLED"), BookingStatus.CANCELLED)
        self.assertIs(BookingStatus.coerce("canceled"), BookingStatus.CANCELLED)
        self.assertIs(BookingStatus.coerce("started"), BookingStatus.STARTED)
        self.assertIs(BookingStatus.coerce(None), BookingStatus.PENDING)

    def test_unusable_records_are_dropped(self) -> None:
        rows = [
            {"id": 1, "scheduledOn": "not a date"},
            "garbage",
            {"id": 2, "scheduled_on": "2025-11-24 11:15:00", "duration": "60"},
        ]
        bookings = normalize_bookings(rows)
        self.assertEqual([booking.id for booking in bookings], ["2"])
        self.assertEqual(bookings[0].duration, 60)


class EnvelopeTestCase(unittest.TestCase):
    def test_booking_envelopes(self) -> None:
        rows = [{"id": 1}]
        self.assertEqual(extract_booking_rows({"data": {"bookings": rows}}), rows)
        self.assertEqual(extract_booking_rows({"bookings": rows}), rows)
        self.assertEqual(extract_booking_rows({"data": {"pending_bookings": rows}}), rows)
        self.assertEqual(extract_booking_rows({"data": rows}), rows)
        self.assertEqual(extract_booking_rows(rows), rows)
        self.assertEqual(extract_booking_rows({"status": "ok"}), [])
        self.assertEqual(extract_booking_rows(None), [])

    def test_collection_envelopes(self) -> None:
        hours = [{"day": "Monday", "from": "09:00", "to": "17:00"}]
        self.assertEqual(extract_collection({"data": {"opening_hours": hours}}, "opening_hours"), hours)
        self.assertEqual(extract_collection({"data": hours}, "opening_hours"), hours)
        keyed = {"Monday": {"from": "09:00", "to": "17:00"}}
        self.assertEqual(extract_collection({"opening_hours": keyed}, "opening_hours"), keyed)
        self.assertEqual(extract_collection("oops", "staff"), [])


if __name__ == "__main__":
    unittest.main()
