from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from .models import Seat, SeatMapDocument, SeatStatus, Section

Statuses = Optional[Mapping[str, SeatStatus]]


def resolve_status(seat: Seat, statuses: Statuses) -> SeatStatus:
    if statuses is not None and seat.id in statuses:
        return statuses[seat.id]
    return seat.status


def seat_price(seat: Seat, section: Section) -> float:
    return seat.price if seat.price else section.price


def total_price(doc: SeatMapDocument, statuses: Statuses = None) -> float:
    """Sum of prices of every occupied seat. Recomputed on every call."""
    return sum(
        seat_price(seat, section)
        for section, seat in doc.iter_seats()
        if resolve_status(seat, statuses) is SeatStatus.occupied
    )


@dataclass
class SectionTotals:
    section_id: str
    name: str
    seats: int = 0
    available: int = 0
    occupied: int = 0
    locked: int = 0
    revenue: float = 0.0


@dataclass
class OccupancySummary:
    seats_total: int = 0
    seats_available: int = 0
    seats_occupied: int = 0
    seats_locked: int = 0
    total_price: float = 0.0
    sections: list[SectionTotals] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "seats_total": self.seats_total,
            "seats_available": self.seats_available,
            "seats_occupied": self.seats_occupied,
            "seats_locked": self.seats_locked,
            "total_price": self.total_price,
            "sections": [vars(s) for s in self.sections],
        }


def summarize(doc: SeatMapDocument, statuses: Statuses = None) -> OccupancySummary:
    summary = OccupancySummary()
    for section in doc.sections:
        totals = SectionTotals(section_id=section.id, name=section.name)
        for seat in section.seats:
            status = resolve_status(seat, statuses)
            totals.seats += 1
            if status is SeatStatus.occupied:
                totals.occupied += 1
                totals.revenue += seat_price(seat, section)
            elif status is SeatStatus.locked:
                totals.locked += 1
            else:
                totals.available += 1
        summary.seats_total += totals.seats
        summary.seats_available += totals.available
        summary.seats_occupied += totals.occupied
        summary.seats_locked += totals.locked
        summary.total_price += totals.revenue
        summary.sections.append(totals)
    return summary
