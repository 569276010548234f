"""Wall-clock time and calendar date helpers used by the scheduling engine."""

from __future__ import annotations

import datetime as dt
import logging
import re

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
DEFAULT_CLOCK_TIME = "10:00 am"
DEFAULT_CLOCK_MINUTES = 10 * 60

_TWELVE_HOUR = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\.?$", re.IGNORECASE)
_TWENTY_FOUR_HOUR = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_DATETIME_PREFIX = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})(?:[ T](\d{1,2}):(\d{2})(?::(\d{2}))?)?"
)


def parse_clock_time(text: str | None) -> int:
    """Return minutes since midnight for ``text``.

    Both ``"9:00 am"`` / ``"12 pm"`` and ``"09:00"`` / ``"09:00:00"`` are
    understood. Schedule data comes from outside the engine, so anything
    unparsable falls back to ``DEFAULT_CLOCK_TIME`` instead of raising.
    """

    if not isinstance(text, str):
        logger.debug("Non-string clock time %r, using default", text)
        return DEFAULT_CLOCK_MINUTES
    value = text.strip()
    match = _TWELVE_HOUR.match(value)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2) or 0)
        if 1 <= hours <= 12 and minutes < 60:
            hours %= 12
            if match.group(3).lower() == "p":
                hours += 12
            return hours * 60 + minutes
    match = _TWENTY_FOUR_HOUR.match(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        seconds = int(match.group(3) or 0)
        if hours < 24 and minutes < 60 and seconds < 60:
            return hours * 60 + minutes
    logger.debug("Unparsable clock time %r, using default", text)
    return DEFAULT_CLOCK_MINUTES


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as ``"H:MM am"``."""

    minutes = int(minutes) % MINUTES_PER_DAY
    hours24, mins = divmod(minutes, 60)
    period = "pm" if hours24 >= 12 else "am"
    hours12 = hours24 % 12 or 12
    return f"{hours12}:{mins:02d} {period}"


def to_24_hour(minutes: int) -> str:
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_12_hour(text: str | None) -> str:
    return format_minutes(parse_clock_time(text))


def date_key(value: object) -> str | None:
    """Return ``YYYY-MM-DD`` built from the local calendar fields of ``value``."""

    if not isinstance(value, (dt.date, dt.datetime)):
        return None
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_date_key(text: str | None) -> dt.date | None:
    if isinstance(text, dt.datetime):
        return text.date()
    if isinstance(text, dt.date):
        return text
    moment = parse_local_datetime(text)
    return moment.date() if moment else None


def parse_local_datetime(text: str | None) -> dt.datetime | None:
    """Parse ``YYYY-MM-DD[ HH:MM[:SS]]`` keeping the wall-clock value.

    Trailing fractions or UTC offsets are ignored rather than converted.
    """

    if isinstance(text, dt.datetime):
        return text.replace(tzinfo=None)
    if not isinstance(text, str):
        return None
    match = _DATETIME_PREFIX.match(text.strip())
    if not match:
        return None
    parts = [int(part) if part else 0 for part in match.groups()]
    try:
        return dt.datetime(*parts)
    except ValueError:
        return None


def minutes_of(moment: dt.datetime) -> int:
    return moment.hour * 60 + moment.minute


def monday_index(day: dt.date) -> int:
    """Weekday with Monday as 0, the engine's canonical convention."""

    return day.weekday()


def sunday_index(day: dt.date) -> int:
    """Weekday with Sunday as 0, as staff working hours are keyed."""

    return monday_to_sunday_index(day.weekday())


def monday_to_sunday_index(index: int) -> int:
    return (index + 1) % 7


def sunday_to_monday_index(index: int) -> int:
    return (index - 1) % 7
