from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from shapely.geometry import Polygon as ShapelyPolygon

from .errors import GeometryError

PARALLEL_EPSILON = 1e-10


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def translated(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def translated(self, dx: float, dy: float) -> "Bounds":
        return Bounds(self.min_x + dx, self.min_y + dy, self.max_x + dx, self.max_y + dy)

    def union(self, other: "Bounds") -> "Bounds":
        return Bounds(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )


EMPTY_BOUNDS = Bounds(0.0, 0.0, 0.0, 0.0)


def compute_bounds(points: Sequence[Point]) -> Bounds:
    if not points:
        return EMPTY_BOUNDS
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return Bounds(min(xs), min(ys), max(xs), max(ys))


def point_in_polygon(p: Point, polygon: Sequence[Point]) -> bool:
    # even-odd ray casting; boundary points may land on either side
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y
        if (yi > p.y) != (yj > p.y):
            x_cross = (xj - xi) * (p.y - yi) / (yj - yi) + xi
            if p.x < x_cross:
                inside = not inside
        j = i
    return inside


def segment_intersection(a1: Point, a2: Point, b1: Point, b2: Point) -> Optional[Point]:
    """
    Intersection of segments a1-a2 and b1-b2, or None.

    Both segment parameters are checked against [0, 1], so the result always
    lies on both segments. Parallel and collinear segments return None.
    """
    denom = (a1.x - a2.x) * (b1.y - b2.y) - (a1.y - a2.y) * (b1.x - b2.x)
    if abs(denom) < PARALLEL_EPSILON:
        return None

    t = ((a1.x - b1.x) * (b1.y - b2.y) - (a1.y - b1.y) * (b1.x - b2.x)) / denom
    u = -((a1.x - a2.x) * (a1.y - b1.y) - (a1.y - a2.y) * (a1.x - b1.x)) / denom
    if not (0.0 <= t <= 1.0 and 0.0 <= u <= 1.0):
        return None
    return Point(a1.x + t * (a2.x - a1.x), a1.y + t * (a2.y - a1.y))


def translate_points(points: Iterable[Point], dx: float, dy: float) -> list[Point]:
    return [p.translated(dx, dy) for p in points]


def _shapely(points: Sequence[Point]) -> ShapelyPolygon:
    return ShapelyPolygon([p.as_tuple() for p in points])


def polygon_area(points: Sequence[Point]) -> float:
    if len(set(points)) < 3:
        return 0.0
    return float(_shapely(points).area)


def validate_polygon(points: Sequence[Point], *, name: str = "polygon") -> None:
    if len(points) < 3:
        raise GeometryError(f"{name} needs at least 3 points (got {len(points)})")
    for p in points:
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            raise GeometryError(f"{name} has a non-finite coordinate")
    if len(set(points)) < 3:
        raise GeometryError(f"{name} has zero area")
    poly = _shapely(points)
    if poly.area <= 0:
        raise GeometryError(f"{name} has zero area")
    if not poly.is_valid:
        raise GeometryError(f"{name} is self-intersecting")


def polygon_color(index: int, total: int) -> str:
    hue = (index * 360) / max(1, total)
    return f"hsl({hue:g}, 70%, 60%)"
