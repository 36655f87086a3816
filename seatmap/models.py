from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, Optional, Union

from .errors import SectionNotFoundError
from .geometry import Bounds, Point, compute_bounds, point_in_polygon, translate_points


class SeatStatus(str, Enum):
    available = "available"
    occupied = "occupied"
    locked = "locked"


class ShapeKind(str, Enum):
    polygon = "polygon"
    rectangle = "rectangle"
    circle = "circle"
    star = "star"
    crescent = "crescent"
    arc = "arc"
    custom = "custom"
    grid = "grid"


@dataclass(frozen=True)
class PolygonBoundary:
    points: tuple[Point, ...]

    @property
    def bounds(self) -> Bounds:
        return compute_bounds(self.points)

    def contains(self, p: Point) -> bool:
        return point_in_polygon(p, self.points)

    def translated(self, dx: float, dy: float) -> "PolygonBoundary":
        return PolygonBoundary(tuple(translate_points(self.points, dx, dy)))


@dataclass(frozen=True)
class PathSpec:
    # Outline drawn by the presentation layer; only its box matters here.
    kind: ShapeKind
    center: Point
    size: float


@dataclass(frozen=True)
class GeneratedPath:
    spec: PathSpec

    @property
    def points(self) -> tuple[Point, ...]:
        return ()

    @property
    def bounds(self) -> Bounds:
        c, s = self.spec.center, self.spec.size
        return Bounds(c.x - s, c.y - s, c.x + s, c.y + s)

    def contains(self, p: Point) -> bool:
        return True

    def translated(self, dx: float, dy: float) -> "GeneratedPath":
        return GeneratedPath(replace(self.spec, center=self.spec.center.translated(dx, dy)))


Boundary = Union[PolygonBoundary, GeneratedPath]


@dataclass(frozen=True)
class Seat:
    id: str
    x: float
    y: float
    row: int
    number: int
    section_id: str
    status: SeatStatus = SeatStatus.available
    price: float = 0.0
    category: str = "standard"
    ticket_type: Optional[str] = None

    def translated(self, dx: float, dy: float) -> "Seat":
        return replace(self, x=self.x + dx, y=self.y + dy)


@dataclass(frozen=True)
class Section:
    id: str
    name: str
    boundary: Boundary
    rows: int
    seats_per_row: int
    price: float = 0.0
    ticket_type: Optional[str] = None
    has_seats: bool = True
    custom_seat_count: Optional[int] = None
    seats: tuple[Seat, ...] = ()
    label_position: Optional[Point] = None
    shape: ShapeKind = ShapeKind.polygon
    color: str = "#3498db"
    category: str = "standard"

    @property
    def points(self) -> tuple[Point, ...]:
        return self.boundary.points

    @property
    def bounds(self) -> Bounds:
        return self.boundary.bounds

    @property
    def label(self) -> Point:
        return self.label_position if self.label_position is not None else self.bounds.center


@dataclass(frozen=True)
class Stage:
    x: float = 350.0
    y: float = 50.0
    width: float = 300.0
    height: float = 80.0


@dataclass(frozen=True)
class Aisle:
    start: Point
    end: Point
    width: float


@dataclass(frozen=True)
class TicketType:
    id: str
    name: str
    display_name: str
    price: float
    color: str


TICKET_TYPES: tuple[TicketType, ...] = (
    TicketType("vip", "vip", "VIP", 150.0, "#FFD700"),
    TicketType("premium", "premium", "Premium", 100.0, "#C0C0C0"),
    TicketType("standard", "standard", "Standard", 50.0, "#22c55e"),
    TicketType("economy", "economy", "Economy", 25.0, "#60a5fa"),
)


def get_ticket_type(ticket_type_id: str) -> Optional[TicketType]:
    for t in TICKET_TYPES:
        if t.id == ticket_type_id:
            return t
    return None


@dataclass
class SeatMapDocument:
    """
    The layout being edited. Sections are immutable records; mutations swap
    whole entries in `sections` so a caller can keep the previous list.
    """

    sections: list[Section] = field(default_factory=list)
    stage: Stage = field(default_factory=Stage)
    aisles: list[Aisle] = field(default_factory=list)

    def index_of(self, section_id: str) -> int:
        for i, s in enumerate(self.sections):
            if s.id == section_id:
                return i
        raise SectionNotFoundError(section_id)

    def get_section(self, section_id: str) -> Section:
        return self.sections[self.index_of(section_id)]

    def has_section(self, section_id: str) -> bool:
        return any(s.id == section_id for s in self.sections)

    def replace_section(self, section: Section) -> None:
        self.sections[self.index_of(section.id)] = section

    def iter_seats(self) -> Iterator[tuple[Section, Seat]]:
        for section in self.sections:
            for seat in section.seats:
                yield section, seat

    def seat_ids(self) -> set[str]:
        return {seat.id for _, seat in self.iter_seats()}

    def has_seat(self, seat_id: str) -> bool:
        return any(seat.id == seat_id for _, seat in self.iter_seats())

    def find_seat(self, seat_id: str) -> Optional[Seat]:
        for _, seat in self.iter_seats():
            if seat.id == seat_id:
                return seat
        return None
