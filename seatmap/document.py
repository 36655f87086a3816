from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Optional, Sequence

from .config import EditorDefaults
from .constraints import PointConstraint, ShapeTransform, project_point_to_constraint
from .errors import (
    GeometryError,
    SeatMapError,
    SectionInUseError,
    SplitFailure,
    SplitResult,
)
from .geometry import (
    Bounds,
    Point,
    compute_bounds,
    polygon_area,
    polygon_color,
    segment_intersection,
    validate_polygon,
)
from .models import (
    Boundary,
    GeneratedPath,
    PathSpec,
    PolygonBoundary,
    SeatMapDocument,
    SeatStatus,
    Section,
    ShapeKind,
    get_ticket_type,
)
from .seats import generate_seats

logger = logging.getLogger(__name__)

Statuses = Optional[Mapping[str, SeatStatus]]

CIRCLE_SEGMENTS = 32
POLYGON_SIDES = 6


def new_section_id() -> str:
    return f"sec-{uuid.uuid4().hex[:10]}"


def with_derived(section: Section, statuses: Statuses = None, *, label_position: Optional[Point] = None) -> Section:
    """Recompute label position and seats from the section's boundary and grid."""
    updated = replace(section, label_position=label_position or section.bounds.center)
    return replace(updated, seats=tuple(generate_seats(updated, statuses)))


def regenerate_seats(doc: SeatMapDocument, section_id: str, statuses: Statuses = None) -> Section:
    section = doc.get_section(section_id)
    updated = replace(section, seats=tuple(generate_seats(section, statuses)))
    doc.replace_section(updated)
    logger.debug("regenerated %d seats for %s", len(updated.seats), section_id)
    return updated


def update_grid(
    doc: SeatMapDocument,
    section_id: str,
    statuses: Statuses = None,
    *,
    rows: Optional[int] = None,
    seats_per_row: Optional[int] = None,
    custom_seat_count: Optional[int] = None,
    has_seats: Optional[bool] = None,
    price: Optional[float] = None,
) -> Section:
    section = doc.get_section(section_id)
    changes: dict = {}
    if rows is not None:
        changes["rows"] = int(rows)
    if seats_per_row is not None:
        changes["seats_per_row"] = int(seats_per_row)
    if custom_seat_count is not None:
        changes["custom_seat_count"] = int(custom_seat_count) or None
    if has_seats is not None:
        changes["has_seats"] = bool(has_seats)
    if price is not None:
        changes["price"] = float(price)
    updated = replace(section, **changes)
    updated = replace(updated, seats=tuple(generate_seats(updated, statuses)))
    doc.replace_section(updated)
    return updated


def _build_section(
    boundary: Boundary,
    name: str,
    defaults: EditorDefaults,
    statuses: Statuses,
    *,
    section_id: Optional[str] = None,
    shape: ShapeKind = ShapeKind.polygon,
    color: str = "#3498db",
    has_seats: bool = True,
    custom_seat_count: Optional[int] = None,
) -> Section:
    section = Section(
        id=section_id or new_section_id(),
        name=name,
        boundary=boundary,
        rows=defaults.rows,
        seats_per_row=defaults.seats_per_row,
        price=defaults.price,
        has_seats=has_seats,
        custom_seat_count=custom_seat_count,
        shape=shape,
        color=color,
    )
    return with_derived(section, statuses)


def add_section_from_points(
    doc: SeatMapDocument,
    points: Sequence[Point],
    defaults: EditorDefaults,
    statuses: Statuses = None,
    *,
    name: Optional[str] = None,
    has_seats: bool = True,
    custom_seat_count: Optional[int] = None,
) -> Section:
    points = list(points)
    validate_polygon(points, name="section polygon")
    section = _build_section(
        PolygonBoundary(tuple(points)),
        name or f"{defaults.section_name} {len(doc.sections) + 1}",
        defaults,
        statuses,
        has_seats=has_seats,
        custom_seat_count=custom_seat_count,
    )
    doc.sections.append(section)
    logger.debug("added section %s with %d seats", section.id, len(section.seats))
    return section


def shape_boundary(shape: ShapeKind | str, center: Point, size: float) -> Boundary:
    shape = ShapeKind(shape)
    if shape in (ShapeKind.rectangle, ShapeKind.grid):
        pts = (
            Point(center.x - size, center.y - size / 2),
            Point(center.x + size, center.y - size / 2),
            Point(center.x + size, center.y + size / 2),
            Point(center.x - size, center.y + size / 2),
        )
        return PolygonBoundary(pts)
    if shape in (ShapeKind.circle, ShapeKind.polygon):
        sides = CIRCLE_SEGMENTS if shape is ShapeKind.circle else POLYGON_SIDES
        pts = tuple(
            Point(center.x + size * math.cos(2 * math.pi * i / sides), center.y + size * math.sin(2 * math.pi * i / sides))
            for i in range(sides)
        )
        return PolygonBoundary(pts)
    return GeneratedPath(PathSpec(kind=shape, center=center, size=size))


def add_shape_section(
    doc: SeatMapDocument,
    shape: ShapeKind | str,
    center: Point,
    defaults: EditorDefaults,
    statuses: Statuses = None,
    *,
    size: Optional[float] = None,
    name: Optional[str] = None,
) -> Section:
    shape = ShapeKind(shape)
    boundary = shape_boundary(shape, center, size if size is not None else defaults.shape_size)
    section = _build_section(
        boundary,
        name or f"{defaults.section_name} {len(doc.sections) + 1}",
        defaults,
        statuses,
        shape=shape,
    )
    section = replace(section, label_position=center)
    doc.sections.append(section)
    return section


def move_section(doc: SeatMapDocument, section_id: str, dx: float, dy: float) -> Section:
    """Translate boundary, seats and label together; the result replaces the old entry."""
    section = doc.get_section(section_id)
    moved = replace(
        section,
        boundary=section.boundary.translated(dx, dy),
        seats=tuple(s.translated(dx, dy) for s in section.seats),
        label_position=section.label.translated(dx, dy),
    )
    doc.replace_section(moved)
    return moved


def _split_failure(section_id: str, reason: str, count: int) -> SplitResult:
    logger.info("split of %s rejected: %s", section_id, reason)
    return SplitResult(failure=SplitFailure(reason=reason, intersection_count=count))


def split_section(
    doc: SeatMapDocument,
    section_id: str,
    line_start: Point,
    line_end: Point,
    statuses: Statuses = None,
) -> SplitResult:
    """
    Cut a polygon section in two along the segment line_start-line_end.

    The segment must cross the boundary exactly twice. On success the
    original entry is removed and the two halves are appended; otherwise the
    document is left as it was and the failure carries the crossing count.
    """
    section = doc.get_section(section_id)
    points = list(section.points)
    if len(points) < 3:
        return _split_failure(section_id, "section must have at least 3 points to split", 0)

    crossings: list[tuple[int, Point]] = []
    n = len(points)
    for i in range(n):
        hit = segment_intersection(points[i], points[(i + 1) % n], line_start, line_end)
        if hit is not None:
            crossings.append((i, hit))

    if len(crossings) != 2:
        return _split_failure(
            section_id,
            f"split line must intersect polygon at exactly 2 points (found {len(crossings)})",
            len(crossings),
        )

    crossings.sort(key=lambda c: c[0])
    (edge1, hit1), (edge2, hit2) = crossings

    first = [hit1, *points[edge1 + 1 : edge2 + 1], hit2]
    second = [hit2, *points[edge2 + 1 :], *points[: edge1 + 1], hit1]
    if min(len(first), len(second)) < 3 or polygon_area(first) <= 0 or polygon_area(second) <= 0:
        return _split_failure(section_id, "split resulted in invalid polygons", 2)

    halves = []
    for idx, (pts, rows) in enumerate(((first, math.ceil(section.rows / 2)), (second, section.rows // 2)), start=1):
        half = replace(
            section,
            id=new_section_id(),
            name=f"{section.name} ({idx})",
            boundary=PolygonBoundary(tuple(pts)),
            rows=rows,
            shape=ShapeKind.polygon,
        )
        halves.append(with_derived(half, statuses))

    doc.sections = [s for s in doc.sections if s.id != section_id] + halves
    logger.debug(
        "split %s into %s (%d seats) and %s (%d seats)",
        section_id,
        halves[0].id,
        len(halves[0].seats),
        halves[1].id,
        len(halves[1].seats),
    )
    return SplitResult(sections=tuple(halves))


def rename_section(doc: SeatMapDocument, section_id: str, name: str) -> Section:
    name = (name or "").strip()
    if not name:
        raise SeatMapError("section name must be a non-empty string")
    updated = replace(doc.get_section(section_id), name=name)
    doc.replace_section(updated)
    return updated


def delete_section(doc: SeatMapDocument, section_id: str, statuses: Statuses = None, *, force: bool = False) -> Section:
    section = doc.get_section(section_id)
    statuses = statuses or {}
    held = sum(
        1
        for seat in section.seats
        if statuses.get(seat.id, seat.status) in (SeatStatus.occupied, SeatStatus.locked)
    )
    if held and not force:
        raise SectionInUseError(section_id, held)
    doc.sections = [s for s in doc.sections if s.id != section_id]
    return section


def _apply_ticket(section: Section, ticket_type_id: str, price: float, row: Optional[int] = None) -> Section:
    seats = tuple(
        replace(seat, ticket_type=ticket_type_id, price=price) if row is None or seat.row == row else seat
        for seat in section.seats
    )
    if row is not None:
        return replace(section, seats=seats)
    return replace(section, ticket_type=ticket_type_id, price=price, seats=seats)


def assign_ticket_type(
    doc: SeatMapDocument,
    ticket_type_id: str,
    section_ids: Optional[Iterable[str]] = None,
) -> int:
    """Apply a ticket type (and its price) to the given sections, or to all of them."""
    ticket = get_ticket_type(ticket_type_id)
    if ticket is None:
        raise SeatMapError(f"unknown ticket type: {ticket_type_id}")
    wanted = None if section_ids is None else set(section_ids)
    if wanted is not None:
        for sid in wanted:
            doc.get_section(sid)
    updated = 0
    for i, section in enumerate(doc.sections):
        if wanted is None or section.id in wanted:
            doc.sections[i] = _apply_ticket(section, ticket.id, ticket.price)
            updated += 1
    return updated


def assign_ticket_type_to_row(doc: SeatMapDocument, section_id: str, row: int, ticket_type_id: str) -> int:
    ticket = get_ticket_type(ticket_type_id)
    if ticket is None:
        raise SeatMapError(f"unknown ticket type: {ticket_type_id}")
    section = doc.get_section(section_id)
    doc.replace_section(_apply_ticket(section, ticket.id, ticket.price, row=row))
    return sum(1 for seat in section.seats if seat.row == row)


@dataclass(frozen=True)
class DetectedText:
    text: str
    bbox: tuple[float, float, float, float]

    @property
    def center(self) -> Point:
        return Point((self.bbox[0] + self.bbox[2]) / 2, (self.bbox[1] + self.bbox[3]) / 2)


def _unique_section_id(doc: SeatMapDocument, base: str, taken: set[str]) -> str:
    candidate = base
    n = 2
    while candidate in taken or doc.has_section(candidate):
        candidate = f"{base}-{n}"
        n += 1
    return candidate


def import_polygons(
    doc: SeatMapDocument,
    polygons: Sequence[Sequence[Point]],
    defaults: EditorDefaults,
    statuses: Statuses = None,
    *,
    detected_text: Sequence[DetectedText] = (),
) -> list[Section]:
    """
    Turn externally detected polygons into sections, one per polygon.

    A polygon takes the first detected label whose box center lies inside
    its bounds; otherwise it is named "Section N". Polygons that fail
    validation are skipped. IDs already in the document get a numeric suffix.
    """
    created: list[Section] = []
    taken: set[str] = set()
    total = len(polygons)
    for index, poly in enumerate(polygons, start=1):
        points = tuple(poly)
        try:
            validate_polygon(points, name=f"detected polygon {index}")
        except GeometryError as e:
            logger.warning("skipping import: %s", e)
            continue
        bounds = compute_bounds(points)
        label = next((t for t in detected_text if bounds.contains(t.center.x, t.center.y)), None)
        name = label.text if label else f"Section {index}"
        section_id = _unique_section_id(doc, f"{name}-{index}", taken)
        taken.add(section_id)
        section = _build_section(
            PolygonBoundary(points),
            name,
            defaults,
            statuses,
            section_id=section_id,
            color=polygon_color(index - 1, total),
        )
        created.append(section)
    doc.sections.extend(created)
    logger.debug("imported %d sections from detected polygons", len(created))
    return created


def layout_bounds(doc: SeatMapDocument) -> Optional[Bounds]:
    out: Optional[Bounds] = None
    for section in doc.sections:
        b = section.bounds
        out = b if out is None else out.union(b)
    return out


def recenter(doc: SeatMapDocument, width: float, height: float) -> Optional[Point]:
    """
    Move every section so the layout is centered in a width x height viewport,
    but only if some section lies outside it. Returns the applied offset.
    """
    overall = layout_bounds(doc)
    if overall is None:
        return None
    if overall.min_x >= 0 and overall.min_y >= 0 and overall.max_x <= width and overall.max_y <= height:
        return None
    center = overall.center
    dx, dy = width / 2 - center.x, height / 2 - center.y
    for section in list(doc.sections):
        move_section(doc, section.id, dx, dy)
    logger.info("recentered layout by (%.1f, %.1f)", dx, dy)
    return Point(dx, dy)


class PointEditSession:
    """
    Vertex editing on a snapshot of one section's points.

    Nothing touches the document until `commit()`; `cancel()` just drops the
    snapshot. While a constraint is active every moved vertex is projected
    onto it.
    """

    def __init__(self, doc: SeatMapDocument, section_id: str):
        section = doc.get_section(section_id)
        if not isinstance(section.boundary, PolygonBoundary):
            raise GeometryError(f"section {section_id} has no editable points")
        self._doc = doc
        self.section_id = section_id
        self.points: list[Point] = list(section.points)
        self.constraint: Optional[PointConstraint] = None
        self.closed = False

    def _check_open(self) -> None:
        if self.closed:
            raise SeatMapError("point edit session is closed")

    def set_constraint(self, constraint: Optional[PointConstraint]) -> None:
        self._check_open()
        self.constraint = constraint

    def apply_transform(self, transform: ShapeTransform) -> None:
        self._check_open()
        self.points = list(transform.points)
        self.constraint = transform.constraint

    def move_point(self, index: int, position: Point) -> Point:
        self._check_open()
        if self.constraint is not None:
            position = project_point_to_constraint(position, self.constraint)
        self.points[index] = position
        return position

    def replace_points(self, points: Sequence[Point]) -> None:
        self._check_open()
        self.points = list(points)

    def delete_points(self, indices: Iterable[int]) -> int:
        self._check_open()
        drop = set(indices)
        remaining = [p for i, p in enumerate(self.points) if i not in drop]
        if len(remaining) < 3:
            raise GeometryError("a section needs at least 3 points")
        removed = len(self.points) - len(remaining)
        self.points = remaining
        return removed

    def commit(self, statuses: Statuses = None) -> Section:
        self._check_open()
        validate_polygon(self.points, name="section polygon")
        section = self._doc.get_section(self.section_id)
        updated = with_derived(replace(section, boundary=PolygonBoundary(tuple(self.points))), statuses)
        self._doc.replace_section(updated)
        self.closed = True
        return updated

    def cancel(self) -> None:
        self.closed = True
