"""Directed segment between two points."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from shapeit.geometry.point import Point, PointLike
from shapeit.utils.math_helpers import is_between, snap_delta

if TYPE_CHECKING:
    from shapeit.geometry.circle import Circle

# Float slack for the inclusive bounds test, so crossings computed exactly
# on an endpoint are not lost to rounding.
_BOUNDS_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Segment:
    p1: Point
    p2: Point
    rotation_step: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "p1", Point.coerce(self.p1))
        object.__setattr__(self, "p2", Point.coerce(self.p2))

    @property
    def vertices(self) -> tuple[Point, Point]:
        return (self.p1, self.p2)

    @property
    def length(self) -> float:
        return self.p1.distance_to(self.p2)

    @property
    def center(self) -> Point:
        return Point((self.p1.x + self.p2.x) / 2, (self.p1.y + self.p2.y) / 2)

    def slope(self, axis: Segment | None = None) -> float:
        """Gradient dy/dx, or tan of the angle relative to ``axis``.

        Vertical segments have an infinite slope, zero-length ones NaN.
        """
        if axis is not None:
            return math.tan(self.angle(axis))
        dx = self.p2.x - self.p1.x
        dy = self.p2.y - self.p1.y
        if dx == 0:
            return math.copysign(math.inf, dy) if dy != 0 else math.nan
        return dy / dx

    def angle(self, axis: Segment | None = None) -> float:
        """Slope angle in radians, in [-pi/2, pi/2].

        With an ``axis`` the result is the signed smallest difference
        between the two slope angles.
        """
        if axis is None:
            return math.atan(self.slope())
        delta = axis.angle() - self.angle()
        return math.atan2(math.sin(delta), math.cos(delta))

    def bounds_contain(self, point: Point) -> bool:
        """Is ``point`` inside the axis-aligned cage of the segment."""
        return is_between(point.x, self.p1.x, self.p2.x, _BOUNDS_TOLERANCE) and is_between(
            point.y, self.p1.y, self.p2.y, _BOUNDS_TOLERANCE
        )

    def contains_point(self, point: Point) -> bool:
        """Is ``point`` on the segment."""
        if not self.bounds_contain(point):
            return False
        cross = (self.p2.x - self.p1.x) * (point.y - self.p1.y) - (self.p2.y - self.p1.y) * (
            point.x - self.p1.x
        )
        return abs(cross) <= _BOUNDS_TOLERANCE * max(self.length, 1.0)

    def intersection(self, other: Segment) -> Point | None:
        """Crossing point of two segments, or None if parallel or apart."""
        x1, y1, x2, y2 = self.p1.x, self.p1.y, self.p2.x, self.p2.y
        x3, y3, x4, y4 = other.p1.x, other.p1.y, other.p2.x, other.p2.y

        det = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
        if det == 0:
            return None

        a = x1 * y2 - y1 * x2
        b = x3 * y4 - y3 * x4
        point = Point(
            (a * (x3 - x4) - (x1 - x2) * b) / det,
            (a * (y3 - y4) - (y1 - y2) * b) / det,
        )

        if self.bounds_contain(point) and other.bounds_contain(point):
            return point
        return None

    def circle_intersections(self, circle: Circle) -> list[Point]:
        return circle.segment_intersections(self)

    def normalize_length(self, minimum: float | None, pivot: PointLike | None = None) -> Segment:
        """Extend the segment away from ``pivot`` so it is at least ``minimum`` long."""
        if not minimum:
            return self
        length = self.length
        if length >= minimum or length == 0:
            return self

        pivot = self.p1 if pivot is None else Point.coerce(pivot)
        if pivot == self.p1:
            counter = self.p2
        elif pivot == self.p2:
            counter = self.p1
        else:
            return self

        factor = minimum / length
        moved = Point(
            pivot.x + (counter.x - pivot.x) * factor,
            pivot.y + (counter.y - pivot.y) * factor,
        )
        if pivot == self.p1:
            return Segment(pivot, moved, self.rotation_step)
        return Segment(moved, pivot, self.rotation_step)

    def cosines(self, other: Segment) -> float | None:
        """Angle between two segments sharing exactly one endpoint.

        Law of cosines on the triangle the two segments span. None when they
        share no endpoint or both endpoints.
        """
        mine = [p for p in self.vertices if p not in other.vertices]
        theirs = [p for p in other.vertices if p not in self.vertices]
        if len(mine) + len(theirs) != 2:
            return None

        self_length = self.length
        other_length = other.length
        if self_length == 0 or other_length == 0:
            return None
        diff_length = Segment(*(mine + theirs)).length

        cos = (diff_length**2 - self_length**2 - other_length**2) / (
            -2 * self_length * other_length
        )
        return math.acos(max(-1.0, min(1.0, cos)))

    def rotate(self, radians: float, pivot: PointLike | None = None) -> Segment:
        """Rotate counter clockwise around ``pivot`` (default: second endpoint)."""
        pivot = self.p2 if pivot is None else Point.coerce(pivot)
        cos = math.cos(radians)
        sin = math.sin(radians)

        def _turn(p: Point) -> Point:
            dx = p.x - pivot.x
            dy = p.y - pivot.y
            return Point(cos * dx - sin * dy + pivot.x, sin * dx + cos * dy + pivot.y)

        return Segment(_turn(self.p1), _turn(self.p2), self.rotation_step)

    def round_angle(self) -> Segment:
        """Snap the angle onto the nearest multiple of ``rotation_step``."""
        if not self.rotation_step or self.length == 0:
            return self
        return self.rotate(snap_delta(self.angle(), self.rotation_step))
