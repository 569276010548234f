"""Normalise booking payloads from the booking service.

The upstream API shape is not fixed: fields arrive in snake_case or
camelCase and customer/staff details may be nested in several ways. This
module is the only place that knows about those variations; everything it
returns is a ``models.Booking``.

Field priority (first non-empty value wins):

* id: ``id``, ``booking_id``, ``bookingId``
* scheduled_on: ``scheduledOn``, ``scheduled_on``, ``date``, ``start_time``,
  ``startTime``
* staff_id: ``staff_id``, ``staffId``, ``staff.id``, first service's
  ``staff_id``/``staffId``
* customer_id: ``customer_id``, ``customerId``, ``customer.id``
* customer_name: ``customer.name``, ``customer.first_name`` +
  ``customer.last_name``, ``customer_name``, ``customerName``, string
  ``customer``
* duration: ``duration``, ``total_duration``, ``totalDuration``, sum of
  service durations (30 minutes for a service without one)
* status: ``status`` (loosely matched), default Pending
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from .clock import parse_local_datetime
from .models import BookedService, Booking, BookingStatus
from .sequencer import DEFAULT_SERVICE_MINUTES

logger = logging.getLogger(__name__)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_id(value: Any) -> str | None:
    return None if value in (None, "") else str(value)


def _as_minutes(value: Any) -> int | None:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _as_price(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _nested(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, Mapping) else {}


def normalize_service(raw: Any) -> BookedService | None:
    if isinstance(raw, (str, int)):
        return BookedService(service_id=str(raw))
    if not isinstance(raw, Mapping):
        return None
    service = _nested(raw, "service")
    service_id = _first(raw, "service_id", "serviceId", "id") or service.get("id")
    if service_id in (None, ""):
        return None
    return BookedService(
        service_id=str(service_id),
        staff_id=_as_id(_first(raw, "staff_id", "staffId") or _nested(raw, "staff").get("id")),
        duration=_as_minutes(_first(raw, "duration", "duration_minutes") or service.get("duration")),
        name=_first(raw, "name", "service_name", "serviceName") or service.get("name") or "",
        price=_as_price(_first(raw, "price") or service.get("price")),
    )


def _customer_name(raw: Mapping[str, Any]) -> str:
    customer = _nested(raw, "customer")
    if customer.get("name"):
        return str(customer["name"])
    full = " ".join(
        str(part) for part in (customer.get("first_name"), customer.get("last_name")) if part
    )
    if full:
        return full
    fallback = _first(raw, "customer_name", "customerName")
    if fallback:
        return str(fallback)
    if isinstance(raw.get("customer"), str):
        return raw["customer"]
    return ""


def _staff_name(raw: Mapping[str, Any]) -> str:
    staff = _nested(raw, "staff")
    if staff.get("name"):
        return str(staff["name"])
    return str(_first(raw, "staff_name", "staffName") or "")


def normalize_booking(raw: Any) -> Booking | None:
    """Return a ``Booking`` or ``None`` when the record has no usable start."""

    if not isinstance(raw, Mapping):
        return None
    scheduled_on = parse_local_datetime(
        _first(raw, "scheduledOn", "scheduled_on", "date", "start_time", "startTime")
    )
    if scheduled_on is None:
        logger.debug("Dropping booking %r without a parsable start", raw.get("id"))
        return None

    services = tuple(
        service
        for service in (normalize_service(item) for item in raw.get("services") or [])
        if service is not None
    )
    duration = _as_minutes(_first(raw, "duration", "total_duration", "totalDuration"))
    if duration is None:
        duration = sum(
            DEFAULT_SERVICE_MINUTES if svc.duration is None else svc.duration for svc in services
        ) or DEFAULT_SERVICE_MINUTES

    staff_id = _first(raw, "staff_id", "staffId") or _nested(raw, "staff").get("id")
    if staff_id in (None, "") and services:
        staff_id = services[0].staff_id

    return Booking(
        id=_as_id(_first(raw, "id", "booking_id", "bookingId")) or "",
        scheduled_on=scheduled_on,
        duration=duration,
        staff_id=_as_id(staff_id),
        customer_id=_as_id(_first(raw, "customer_id", "customerId") or _nested(raw, "customer").get("id")),
        customer_name=_customer_name(raw),
        staff_name=_staff_name(raw),
        services=services,
        status=BookingStatus.coerce(raw.get("status")),
        extra={key: raw[key] for key in ("payment", "service") if key in raw},
    )


def normalize_bookings(rows: Iterable[Any]) -> list[Booking]:
    bookings = []
    for row in rows:
        booking = normalize_booking(row)
        if booking is not None:
            bookings.append(booking)
    return bookings


def extract_booking_rows(payload: Any) -> list[Any]:
    """Find the list of bookings inside a response envelope.

    Accepts ``{"data": {"bookings": [...]}}``, ``{"bookings": [...]}``,
    ``{"data": {"pending_bookings": [...]}}``, ``{"data": [...]}`` and a
    bare list, in that order.
    """

    if isinstance(payload, list):
        return payload
    if not isinstance(payload, Mapping):
        return []
    data = payload.get("data")
    if isinstance(data, Mapping):
        for key in ("bookings", "pending_bookings"):
            if isinstance(data.get(key), list):
                return data[key]
    if isinstance(payload.get("bookings"), list):
        return payload["bookings"]
    if isinstance(data, list):
        return data
    return []


def extract_collection(payload: Any, *keys: str) -> list[Any] | Mapping[str, Any]:
    """Unwrap opening hours or staff rosters from ``data``/``keys`` envelopes.

    Keyed collections (``{"Monday": {...}}``) are returned as mappings.
    """

    if isinstance(payload, list):
        return payload
    if not isinstance(payload, Mapping):
        return []
    data = payload.get("data", payload)
    if isinstance(data, list):
        return data
    if isinstance(data, Mapping):
        for key in keys:
            value = data.get(key)
            if isinstance(value, (list, Mapping)):
                return value
    return []
