"""Geometry for booking cards drawn against hour-high calendar cells."""

from __future__ import annotations

from typing import Iterable, Sequence

from .clock import format_minutes
from .models import Booking, CardGeometry
from .occupancy import HOUR_MINUTES, bookings_starting_in


def card_geometry(booking: Booking, cell_start: int, z_index: int = 0) -> CardGeometry:
    """Offset and height of a card as percentages of its hour cell.

    Height may exceed 100 so a long booking visibly runs into later cells.
    """

    top = max(0.0, (booking.start_minutes - cell_start) / HOUR_MINUTES * 100)
    height = (booking.end_minutes - booking.start_minutes) / HOUR_MINUTES * 100
    return CardGeometry(
        booking_id=booking.id,
        top_percent=top,
        height_percent=height,
        z_index=z_index,
    )


def layout_cell(cell_start: int, bookings: Iterable[Booking]) -> list[CardGeometry]:
    # z-order follows list order; simultaneous starts are not re-sorted.
    starting = bookings_starting_in(bookings, cell_start, cell_start + HOUR_MINUTES)
    return [card_geometry(booking, cell_start, z_index=index) for index, booking in enumerate(starting)]


def layout_day(bookings: Sequence[Booking], cell_starts: Iterable[int]) -> list[dict]:
    """One entry per hour cell; earlier cells stack above later ones."""

    starts = list(cell_starts)
    cells = []
    for position, cell_start in enumerate(starts):
        cards = layout_cell(cell_start, bookings)
        cells.append(
            {
                "start_minutes": cell_start,
                "label": format_minutes(cell_start),
                "z_index": len(starts) - position,
                "cards": [card.as_dict() for card in cards],
            }
        )
    return cells
