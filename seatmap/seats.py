from __future__ import annotations

import logging
import math
from typing import Mapping, Optional

from .geometry import Point
from .models import Seat, SeatStatus, Section

logger = logging.getLogger(__name__)


def seat_id(section_id: str, row: int, number: int) -> str:
    return f"{section_id}-R{row}-S{number}"


def _grid_shape(section: Section, width: float, height: float) -> tuple[int, int, Optional[int]]:
    # (rows, seats per row, cap on kept seats)
    count = section.custom_seat_count
    if count is not None and count > 0:
        aspect = width / height
        rows = math.ceil(math.sqrt(count / aspect))
        per_row = math.ceil(count / rows)
        return rows, per_row, count
    return section.rows, section.seats_per_row, None


def generate_seats(section: Section, statuses: Optional[Mapping[str, SeatStatus]] = None) -> list[Seat]:
    """
    Lay a uniform grid over the section's bounding box and keep the cells whose
    centers fall inside the boundary.

    Seats come out row-major (row 1 first, then by seat number). Status is
    read from `statuses`, defaulting to available, so regeneration never
    resets a seat that is tracked elsewhere.
    """
    if not section.has_seats:
        return []

    bounds = section.bounds
    if bounds.is_degenerate():
        logger.debug("section %s has degenerate bounds; no seats generated", section.id)
        return []

    rows, per_row, cap = _grid_shape(section, bounds.width, bounds.height)
    if rows <= 0 or per_row <= 0:
        return []

    statuses = statuses or {}
    spacing_x = bounds.width / per_row
    spacing_y = bounds.height / rows
    boundary = section.boundary

    seats: list[Seat] = []
    for r in range(rows):
        for c in range(per_row):
            if cap is not None and len(seats) >= cap:
                return seats
            x = bounds.min_x + c * spacing_x + spacing_x / 2
            y = bounds.min_y + r * spacing_y + spacing_y / 2
            if not boundary.contains(Point(x, y)):
                continue
            sid = seat_id(section.id, r + 1, c + 1)
            seats.append(
                Seat(
                    id=sid,
                    x=x,
                    y=y,
                    row=r + 1,
                    number=c + 1,
                    section_id=section.id,
                    status=statuses.get(sid, SeatStatus.available),
                    price=section.price,
                    category=section.category,
                    ticket_type=section.ticket_type,
                )
            )
    return seats
