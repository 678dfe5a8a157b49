"""Circle or circular arc."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from shapeit.geometry.point import Point, PointLike

if TYPE_CHECKING:
    from shapeit.geometry.segment import Segment

TAU = 2 * math.pi

# Arc membership slack, so points computed on an arc boundary stay on it.
_RAD_TOLERANCE = 1e-12


def _unique(points: list[Point]) -> list[Point]:
    seen: list[Point] = []
    for point in points:
        if point not in seen:
            seen.append(point)
    return seen


@dataclass(frozen=True)
class Circle:
    """Circle around ``center``; ``rad1``/``rad2`` bound the arc it covers.

    The bounds are not ordered and may exceed a full turn.
    """

    center: Point
    r: float
    rad1: float = 0.0
    rad2: float = TAU

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", Point.coerce(self.center))
        if self.r < 0:
            raise ValueError(f"Circle radius must be non-negative, got {self.r}")

    @property
    def x(self) -> float:
        return self.center.x

    @property
    def y(self) -> float:
        return self.center.y

    @property
    def radius(self) -> float:
        return self.r

    def has_rad(self, rad: float | None) -> bool:
        """Does the arc cover ``rad``, modulo full turns."""
        if rad is None or math.isnan(rad):
            return False
        lo, hi = (self.rad1, self.rad2) if self.rad1 < self.rad2 else (self.rad2, self.rad1)
        if hi - lo >= TAU:
            return True
        shifted = lo + (rad - lo) % TAU
        return shifted <= hi + _RAD_TOLERANCE or shifted >= lo + TAU - _RAD_TOLERANCE

    def x_at(self, rad: float) -> float | None:
        if not self.has_rad(rad):
            return None
        return self.r * math.cos(rad) + self.x

    def y_at(self, rad: float) -> float | None:
        if not self.has_rad(rad):
            return None
        return self.r * math.sin(rad) + self.y

    def point_at(self, rad: float) -> Point | None:
        if not self.has_rad(rad):
            return None
        return Point(self.r * math.cos(rad) + self.x, self.r * math.sin(rad) + self.y)

    def rad_of(self, x: float, y: float) -> float | None:
        """Angle of (x, y) around the center, None when off the arc."""
        rad = math.atan2(y - self.y, x - self.x)
        return rad if self.has_rad(rad) else None

    def has_point(self, point: Point) -> bool:
        """Angular membership of ``point`` in the arc (distance is not checked)."""
        return self.rad_of(point.x, point.y) is not None

    def circle_intersections(self, other: Circle) -> list[Point]:
        dx = other.x - self.x
        dy = other.y - self.y
        d = math.hypot(dx, dy)

        if d == 0 or d > self.r + other.r or d < abs(self.r - other.r):
            return []

        # Distance from our center to the radical axis, along the center line
        a = (self.r**2 - other.r**2 + d**2) / (2 * d)
        h = math.sqrt(max(self.r**2 - a**2, 0.0))
        mx = self.x + dx * a / d
        my = self.y + dy * a / d
        rx = -dy * h / d
        ry = dx * h / d

        candidates = _unique([Point(mx + rx, my + ry), Point(mx - rx, my - ry)])
        return [p for p in candidates if self.has_point(p) and other.has_point(p)]

    def segment_intersections(self, segment: Segment) -> list[Point]:
        x1 = segment.p1.x - self.x
        x2 = segment.p2.x - self.x
        y1 = segment.p1.y - self.y
        y2 = segment.p2.y - self.y
        dx = x2 - x1
        dy = y2 - y1
        d2 = dx**2 + dy**2
        if d2 == 0:
            return []

        h = x1 * y2 - x2 * y1
        delta = self.r**2 * d2 - h**2
        if delta < 0:
            return []

        sign = math.copysign(1.0, dy) if dy != 0 else 1.0
        root = math.sqrt(delta)
        candidates = [
            Point(
                (h * dy + sign * dx * root) / d2 + self.x,
                (-h * dx + abs(dy) * root) / d2 + self.y,
            ),
            Point(
                (h * dy - sign * dx * root) / d2 + self.x,
                (-h * dx - abs(dy) * root) / d2 + self.y,
            ),
        ]
        return _unique(
            [p for p in candidates if self.has_point(p) and segment.bounds_contain(p)]
        )

    def move_to(self, pivot: PointLike) -> Circle:
        return Circle(Point.coerce(pivot), self.r, self.rad1, self.rad2)
