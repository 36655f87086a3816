from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import Section


class SeatMapError(Exception):
    pass


class GeometryError(SeatMapError):
    pass


class ConfigError(SeatMapError):
    pass


class LayoutFormatError(SeatMapError):
    pass


class SectionNotFoundError(SeatMapError):
    def __init__(self, section_id: str):
        super().__init__(f"section not found: {section_id}")
        self.section_id = section_id


class GuardError(SeatMapError):
    def __init__(self, seat_id: str, message: str):
        super().__init__(message)
        self.seat_id = seat_id


class SeatLockedError(GuardError):
    def __init__(self, seat_id: str):
        super().__init__(seat_id, f"seat {seat_id} is locked")


class TransitionInFlightError(GuardError):
    def __init__(self, seat_id: str):
        super().__init__(seat_id, f"seat {seat_id} already has a transition in flight")


class UnknownSeatError(GuardError):
    def __init__(self, seat_id: str):
        super().__init__(seat_id, f"unknown seat: {seat_id}")


@dataclass(frozen=True)
class SplitFailure:
    reason: str
    intersection_count: int


@dataclass(frozen=True)
class SplitResult:
    """Outcome of a split request. On failure the document is untouched."""

    sections: tuple["Section", ...] = field(default_factory=tuple)
    failure: Optional[SplitFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class SectionInUseError(SeatMapError):
    def __init__(self, section_id: str, held: int):
        super().__init__(f"section {section_id} has {held} occupied or locked seats")
        self.section_id = section_id
        self.held = held
