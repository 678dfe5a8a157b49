"""Rectangle: a Polygon with four right-angled corners."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Any

from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import box

from shapeit.geometry.circle import Circle
from shapeit.geometry.point import Point, PointLike
from shapeit.geometry.polygon import Polygon
from shapeit.geometry.segment import Segment
from shapeit.utils.math_helpers import snap_delta

# Allowed deviation of each corner from a right angle
_RIGHT_ANGLE_TOLERANCE = 1e-5


class Rectangle(Polygon):
    def __init__(
        self,
        vertices: Iterable[PointLike],
        rotation_step: float | None = None,
    ) -> None:
        super().__init__(vertices, closed=True)
        if len(self.vertices) != 4:
            raise ValueError(f"A rectangle must have 4 corners, got {len(self.vertices)}")

        for cosine in self.cosines():
            if cosine is None or abs(cosine - math.pi / 2) > _RIGHT_ANGLE_TOLERANCE:
                raise ValueError("All rectangle corners must be right angles")

        self.rotation_step = rotation_step

    @classmethod
    def from_scalars(
        cls, x: float, y: float, w: float, h: float, rotation_step: float | None = None
    ) -> Rectangle:
        return cls([(x, y), (x + w, y), (x + w, y + h), (x, y + h)], rotation_step)

    @classmethod
    def from_bounds(
        cls, bounds: tuple[float, float, float, float], rotation_step: float | None = None
    ) -> Rectangle:
        min_x, min_y, max_x, max_y = bounds
        return cls.from_scalars(min_x, min_y, max_x - min_x, max_y - min_y, rotation_step)

    def _options(self) -> dict[str, Any]:
        return {"rotation_step": self.rotation_step}

    def __repr__(self) -> str:
        return f"{super().__repr__()[:-1]}, rotation_step={self.rotation_step})"

    def width(self, edges: Sequence[Segment] | None = None) -> float:
        """Length of the edge closest to horizontal."""
        edges = self.edges() if edges is None else edges
        return min(edges, key=lambda e: abs(e.angle())).length

    def height(self, edges: Sequence[Segment] | None = None) -> float:
        """Length of the edge closest to vertical."""
        edges = self.edges() if edges is None else edges
        return max(edges, key=lambda e: abs(e.angle())).length

    def rotation(self) -> float:
        """Edge angle closest to zero."""
        return min(self.angles(), key=abs)

    def index_corner(self) -> Point | None:
        """The corner that is the top-left one once rotation is undone."""
        center = self.centroid()
        rotation = self.rotation()
        upright = self.rotate(-rotation)
        circle = Circle(center, center.distance_to(self.vertices[0]))
        min_x, min_y, _, _ = upright.bounds()
        rad = circle.rad_of(min_x, min_y)
        if rad is None:
            return None
        return circle.point_at(rad + rotation)

    def contains_point(self, point: PointLike) -> bool:
        """Axis-aligned containment in the rectangle's bounds, edges included."""
        point = Point.coerce(point)
        return box(*self.bounds()).covers(ShapelyPoint(point.x, point.y))

    def fit_with(self, target: Polygon, use_mirroring: bool = True) -> Rectangle:
        """Polygon fit, then the rotation is snapped onto ``rotation_step``."""
        fitted = super().fit_with(target, use_mirroring)
        if self.rotation_step:
            fitted = fitted.rotate(snap_delta(fitted.rotation(), self.rotation_step))
        return fitted
