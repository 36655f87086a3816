from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

from .geometry import Point, compute_bounds

TWO_PI = 2 * math.pi

MIN_RADIUS = 8.0
MIN_EXTENT = 16.0


class SemiCircleOrientation(str, Enum):
    top = "top"
    bottom = "bottom"
    left = "left"
    right = "right"


# (start, end) in radians, screen coordinates (y grows downward)
SEMI_CIRCLE_ANGLES: dict[SemiCircleOrientation, tuple[float, float]] = {
    SemiCircleOrientation.top: (math.pi, TWO_PI),
    SemiCircleOrientation.bottom: (0.0, math.pi),
    SemiCircleOrientation.left: (math.pi / 2, 3 * math.pi / 2),
    SemiCircleOrientation.right: (-math.pi / 2, math.pi / 2),
}


@dataclass(frozen=True)
class CircleConstraint:
    center: Point
    radius: float


@dataclass(frozen=True)
class EllipseConstraint:
    center: Point
    radius_x: float
    radius_y: float
    rotation: float = 0.0


@dataclass(frozen=True)
class SemiCircleConstraint:
    center: Point
    radius: float
    orientation: SemiCircleOrientation


@dataclass(frozen=True)
class ArcConstraint:
    center: Point
    radius: float
    start_angle: float
    end_angle: float


PointConstraint = Union[CircleConstraint, EllipseConstraint, SemiCircleConstraint, ArcConstraint]


@dataclass(frozen=True)
class ShapeTransform:
    points: list[Point]
    constraint: PointConstraint


def normalize_angle(angle: float) -> float:
    return angle % TWO_PI


def clamp_angle(angle: float, start: float, end: float) -> float:
    """
    Clamp `angle` into the counter-clockwise range start..end.

    Angles outside the range snap to whichever end of the arc is angularly
    closer. A range of a full turn or more never clamps.
    """
    if end < start:
        start, end = end, start
    if end - start >= TWO_PI:
        return angle

    n_start = normalize_angle(start)
    n_end = n_start + (end - start)
    target = normalize_angle(angle)
    if target < n_start:
        target += TWO_PI
    if target <= n_end:
        return target

    past_end = target - n_end
    before_start = n_start + TWO_PI - target
    return n_end if past_end <= before_start else n_start


def _on_circle(center: Point, radius: float, angle: float) -> Point:
    return Point(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle))


def _on_ellipse(center: Point, radius_x: float, radius_y: float, rotation: float, angle: float) -> Point:
    ex = radius_x * math.cos(angle)
    ey = radius_y * math.sin(angle)
    if rotation:
        cos_r, sin_r = math.cos(rotation), math.sin(rotation)
        ex, ey = ex * cos_r - ey * sin_r, ex * sin_r + ey * cos_r
    return Point(center.x + ex, center.y + ey)


def create_circle_transform(points: Sequence[Point], count: int) -> ShapeTransform:
    bounds = compute_bounds(points)
    center = bounds.center
    radius = max(MIN_RADIUS, min(bounds.width / 2, bounds.height / 2))
    safe_count = max(6, count)

    new_points = [_on_circle(center, radius, TWO_PI * i / safe_count) for i in range(safe_count)]
    return ShapeTransform(new_points, CircleConstraint(center, radius))


def create_ellipse_transform(points: Sequence[Point], count: int, ratio: float = 1.0) -> ShapeTransform:
    bounds = compute_bounds(points)
    center = bounds.center
    radius_x = max(bounds.width, MIN_EXTENT) / 2
    radius_y = max(bounds.height, MIN_EXTENT) / 2 * ratio
    safe_count = max(6, count)

    new_points = [
        _on_ellipse(center, radius_x, radius_y, 0.0, TWO_PI * i / safe_count) for i in range(safe_count)
    ]
    return ShapeTransform(new_points, EllipseConstraint(center, radius_x, radius_y))


def create_semicircle_transform(
    points: Sequence[Point],
    count: int,
    orientation: SemiCircleOrientation | str,
) -> ShapeTransform:
    orientation = SemiCircleOrientation(orientation)
    bounds = compute_bounds(points)
    center = bounds.center
    width = max(bounds.width, MIN_EXTENT)
    height = max(bounds.height, MIN_EXTENT)

    horizontal = orientation in (SemiCircleOrientation.top, SemiCircleOrientation.bottom)
    radius = width / 2 if horizontal else height / 2
    start, end = SEMI_CIRCLE_ANGLES[orientation]

    safe_count = max(4, count)
    step = (end - start) / (safe_count - 1)
    new_points = [_on_circle(center, radius, start + step * i) for i in range(safe_count)]
    return ShapeTransform(new_points, SemiCircleConstraint(center, radius, orientation))


def create_arc_transform(
    points: Sequence[Point],
    count: int,
    start_angle_deg: float,
    sweep_angle_deg: float,
) -> ShapeTransform:
    bounds = compute_bounds(points)
    center = bounds.center
    radius = max(MIN_RADIUS, min(bounds.width / 2, bounds.height / 2))
    safe_count = max(3, count)

    start = math.radians(start_angle_deg)
    sweep = math.radians(sweep_angle_deg)
    step = sweep / (safe_count - 1)
    new_points = [_on_circle(center, radius, start + step * i) for i in range(safe_count)]
    return ShapeTransform(new_points, ArcConstraint(center, radius, start, start + sweep))


def project_point_to_constraint(point: Point, constraint: PointConstraint) -> Point:
    """
    Snap `point` onto the constraint curve along the ray from its center.

    Called for every pointer-move sample of a vertex drag. A point sitting
    exactly on the center projects to angle 0.
    """
    dx = point.x - constraint.center.x
    dy = point.y - constraint.center.y

    if isinstance(constraint, CircleConstraint):
        return _on_circle(constraint.center, constraint.radius, math.atan2(dy, dx))

    if isinstance(constraint, EllipseConstraint):
        rotation = constraint.rotation
        if rotation:
            cos_r, sin_r = math.cos(-rotation), math.sin(-rotation)
            dx, dy = dx * cos_r - dy * sin_r, dx * sin_r + dy * cos_r
        return _on_ellipse(
            constraint.center,
            constraint.radius_x,
            constraint.radius_y,
            rotation,
            math.atan2(dy, dx),
        )

    if isinstance(constraint, SemiCircleConstraint):
        start, end = SEMI_CIRCLE_ANGLES[constraint.orientation]
        angle = clamp_angle(math.atan2(dy, dx), start, end)
        return _on_circle(constraint.center, constraint.radius, angle)

    if isinstance(constraint, ArcConstraint):
        angle = clamp_angle(math.atan2(dy, dx), constraint.start_angle, constraint.end_angle)
        return _on_circle(constraint.center, constraint.radius, angle)

    return point
