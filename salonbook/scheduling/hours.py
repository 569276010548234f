"""Resolve branch opening hours and staff working hours for a calendar date.

The engine's canonical weekday is ``date.weekday()`` (Monday = 0). Branch
opening hours are matched against that index directly. Staff working-hours
records are keyed Sunday = 0 by the staff service, so ``works_on`` converts
at its boundary with ``clock.sunday_index`` rather than carrying a second
convention through the rest of the engine.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any, Iterable, Mapping

from .clock import monday_index, sunday_index, to_12_hour
from .models import OpenInterval

logger = logging.getLogger(__name__)

DAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_RANGE_SEPARATOR = re.compile(r"\s*(?:-|–|—|\bto\b)\s*", re.IGNORECASE)


def day_name_index(text: str) -> int | None:
    """Return the Monday = 0 index for a day name or abbreviation."""

    name = text.strip().lower().rstrip(".")
    if len(name) < 2:
        return None
    for index, full in enumerate(DAY_NAMES):
        if full.startswith(name):
            return index
    return None


def parse_day_span(text: Any, *, wrap_ranges: bool = False) -> tuple[int, ...]:
    """Expand ``"Monday"`` or ``"Mon - Fri"`` into Monday = 0 weekday indices.

    A reversed range such as ``"Saturday - Monday"`` is empty unless
    ``wrap_ranges`` is set, in which case it runs across the week boundary.
    """

    if not isinstance(text, str) or not text.strip():
        return ()
    parts = _RANGE_SEPARATOR.split(text.strip())
    if len(parts) == 1:
        index = day_name_index(parts[0])
        return () if index is None else (index,)
    if len(parts) != 2:
        return ()
    first, last = day_name_index(parts[0]), day_name_index(parts[1])
    if first is None or last is None:
        return ()
    if first <= last:
        return tuple(range(first, last + 1))
    if wrap_ranges:
        return tuple(range(first, 7)) + tuple(range(0, last + 1))
    return ()


def _iter_opening_entries(entries: Any) -> Iterable[Mapping[str, Any]]:
    if not entries:
        return []
    if isinstance(entries, Mapping):
        # Keyed form: {"Monday - Friday": {"from": ..., "to": ...}}
        return [
            {"day": day, **(value if isinstance(value, Mapping) else {})}
            for day, value in entries.items()
        ]
    return [entry for entry in entries if isinstance(entry, Mapping)]


def _entry_bounds(entry: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = entry.get(key)
        if value:
            return value
    return None


def resolve_opening_hours(
    entries: Any,
    day: dt.date,
    *,
    wrap_ranges: bool = False,
) -> OpenInterval | None:
    """Return the branch's open interval for ``day``, or ``None`` when closed."""

    if not isinstance(day, dt.date):
        return None
    weekday = monday_index(day)
    for entry in _iter_opening_entries(entries):
        span = parse_day_span(entry.get("day"), wrap_ranges=wrap_ranges)
        if not span:
            logger.debug("Skipping opening-hours entry with unusable day %r", entry.get("day"))
            continue
        if weekday not in span:
            continue
        opens = _entry_bounds(entry, "from", "open", "start", "start_time")
        closes = _entry_bounds(entry, "to", "close", "end", "end_time")
        return OpenInterval(start=to_12_hour(opens), end=to_12_hour(closes))
    return None


def _working_entry(entries: Iterable[Mapping[str, Any]], day: dt.date) -> Mapping[str, Any] | None:
    target = sunday_index(day)
    for entry in entries:
        try:
            entry_day = int(entry.get("day"))
        except (TypeError, ValueError):
            continue
        if entry_day == target:
            return entry
    return None


def works_on(entries: Iterable[Mapping[str, Any]] | None, day: dt.date) -> bool:
    """Return whether a staff member with ``entries`` works on ``day``.

    Presence of an entry for the weekday means working; ``is_working`` is not
    consulted. Staff without any working-hours data are always available.
    """

    rows = list(entries or [])
    if not rows:
        return True
    return _working_entry(rows, day) is not None


def working_interval(
    entries: Iterable[Mapping[str, Any]] | None, day: dt.date
) -> OpenInterval | None:
    rows = list(entries or [])
    if not rows:
        return None
    entry = _working_entry(rows, day)
    if entry is None:
        return None
    starts = _entry_bounds(entry, "start_time", "startTime", "from")
    ends = _entry_bounds(entry, "end_time", "endTime", "to")
    if not starts or not ends:
        return None
    return OpenInterval(start=to_12_hour(starts), end=to_12_hour(ends))
