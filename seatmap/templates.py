from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Mapping, Optional

from .config import EditorDefaults
from .document import new_section_id, with_derived
from .errors import SeatMapError
from .geometry import Point
from .models import PolygonBoundary, SeatMapDocument, SeatStatus, Section, ShapeKind


def annular_arc_points(
    cx: float,
    cy: float,
    inner_radius: float,
    outer_radius: float,
    start_deg: float,
    end_deg: float,
    segments: int = 20,
) -> list[Point]:
    # outer edge start->end, then inner edge end->start
    pts: list[Point] = []
    for i in range(segments + 1):
        a = math.radians(start_deg + (end_deg - start_deg) * i / segments)
        pts.append(Point(cx + math.cos(a) * outer_radius, cy + math.sin(a) * outer_radius))
    for i in range(segments, -1, -1):
        a = math.radians(start_deg + (end_deg - start_deg) * i / segments)
        pts.append(Point(cx + math.cos(a) * inner_radius, cy + math.sin(a) * inner_radius))
    return pts


def rectangle_points(cx: float, cy: float, width: float, height: float) -> list[Point]:
    return [
        Point(cx - width / 2, cy - height / 2),
        Point(cx + width / 2, cy - height / 2),
        Point(cx + width / 2, cy + height / 2),
        Point(cx - width / 2, cy + height / 2),
    ]


@dataclass(frozen=True)
class SectionTemplate:
    id: str
    name: str
    description: str
    color: str
    rows: int
    seats_per_row: int
    shape: ShapeKind
    label_offset: float
    outline: Callable[[float, float, int, int], list[Point]]


def _arc(inner: float, outer: float, start: float, end: float, segments: int):
    return lambda cx, cy, rows, per_row: annular_arc_points(cx, cy, inner, outer, start, end, segments)


def _grid(seat_w: float, row_h: float):
    return lambda cx, cy, rows, per_row: rectangle_points(cx, cy, per_row * seat_w, rows * row_h)


SECTION_TEMPLATES: tuple[SectionTemplate, ...] = (
    SectionTemplate("theater", "Theater", "Curved section around the stage", "#667eea", 8, 12, ShapeKind.arc, -20, _arc(100, 200, 45, 135, 30)),
    SectionTemplate("stadium", "Stadium", "Wide oval arc", "#f093fb", 10, 20, ShapeKind.arc, -30, _arc(120, 220, 30, 150, 40)),
    SectionTemplate("arena", "Arena", "Rectangular premium block", "#4facfe", 6, 10, ShapeKind.rectangle, 0, _grid(20, 25)),
    SectionTemplate("conference", "Conference", "Straight seat grid", "#43e97b", 8, 15, ShapeKind.grid, 0, _grid(18, 22)),
    SectionTemplate("circular", "Circular", "Half ring", "#fa709a", 6, 15, ShapeKind.arc, -15, _arc(80, 150, 0, 180, 50)),
    SectionTemplate("concert", "Concert", "Deep curved section", "#30cfd0", 12, 18, ShapeKind.arc, -40, _arc(100, 230, 40, 140, 35)),
)


def get_template(template_id: str) -> Optional[SectionTemplate]:
    for t in SECTION_TEMPLATES:
        if t.id == template_id:
            return t
    return None


def add_template_section(
    doc: SeatMapDocument,
    template_id: str,
    defaults: EditorDefaults,
    statuses: Optional[Mapping[str, SeatStatus]] = None,
    *,
    center: Point = Point(500.0, 300.0),
    rows: Optional[int] = None,
    seats_per_row: Optional[int] = None,
    name: Optional[str] = None,
) -> Section:
    template = get_template(template_id)
    if template is None:
        raise SeatMapError(f"unknown template: {template_id}")
    rows = rows or template.rows
    per_row = seats_per_row or template.seats_per_row
    points = template.outline(center.x, center.y, rows, per_row)

    section = Section(
        id=new_section_id(),
        name=name or f"{template.name} {len(doc.sections) + 1}",
        boundary=PolygonBoundary(tuple(points)),
        rows=rows,
        seats_per_row=per_row,
        price=defaults.price,
        shape=template.shape,
        color=template.color,
    )
    section = with_derived(section, statuses, label_position=Point(center.x, center.y + template.label_offset))
    doc.sections.append(section)
    return section
