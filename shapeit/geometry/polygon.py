"""Polygon: ordered vertices, closed or open, with rigid transforms and fitting."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any

import numpy as np
from shapely.geometry import LineString
from shapely.geometry import Polygon as ShapelyPolygon

from shapeit.geometry.circle import Circle
from shapeit.geometry.point import Point, PointLike
from shapeit.geometry.segment import Segment
from shapeit.utils import geometry as geo
from shapeit.utils.math_helpers import is_between, is_between_threshold

if TYPE_CHECKING:
    from shapeit.geometry.rectangle import Rectangle

# Vertex merge distance for reduce_lod: a fifth of the smaller bbox side,
# clamped to this range.
_MERGE_DIVISOR = 5
_MERGE_MIN = 10.0
_MERGE_MAX = 50.0

# Vertex-for-vertex tolerance when testing a template for mirror symmetry
_MIRROR_TOLERANCE = 1e-9


def _merge_adjacent(points: list[Point]) -> list[Point]:
    """Drop points similar to their predecessor, including across the wrap."""
    merged: list[Point] = []
    for point in points:
        if merged and point.is_similar(merged[-1]):
            continue
        merged.append(point)
    while len(merged) > 1 and merged[-1].is_similar(merged[0]):
        merged.pop()
    return merged


class Polygon:
    """Ordered sequence of points. Closed polygons get a wrap-around edge."""

    def __init__(self, vertices: Iterable[PointLike] = (), closed: bool = True) -> None:
        self._vertices = tuple(_merge_adjacent([Point.coerce(v) for v in vertices]))
        self._closed = bool(closed)

    # --- Construction helpers ---

    def _options(self) -> dict[str, Any]:
        return {"closed": self._closed}

    def _derive(self, vertices: Iterable[PointLike]) -> Polygon:
        """New instance of the same class and options with other vertices."""
        return type(self)(vertices, **self._options())

    # --- Basic accessors ---

    @property
    def vertices(self) -> tuple[Point, ...]:
        return self._vertices

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_open(self) -> bool:
        return not self._closed

    def __len__(self) -> int:
        return len(self._vertices)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._vertices)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polygon):
            return NotImplemented
        return self._vertices == other._vertices and self._closed == other._closed

    def __hash__(self) -> int:
        return hash((self._vertices, self._closed))

    def __repr__(self) -> str:
        pts = ", ".join(f"({p.x:.2f}, {p.y:.2f})" for p in self._vertices)
        return f"{type(self).__name__}([{pts}], closed={self._closed})"

    def to_array(self) -> np.ndarray:
        return geo.as_array(self._vertices)

    def to_points(self) -> list[tuple[float, float]]:
        return [p.as_tuple() for p in self._vertices]

    def to_shapely(self) -> ShapelyPolygon | LineString:
        coords = self.to_points()
        if self._closed and len(coords) >= 3:
            return ShapelyPolygon(coords)
        return LineString(coords)

    # --- Derived features ---

    def edges(self) -> list[Segment]:
        n = len(self._vertices)
        edges = [Segment(self._vertices[i], self._vertices[(i + 1) % n]) for i in range(n)]
        if self.is_open and edges:
            edges.pop()
        return edges

    def lengths(self, edges: Sequence[Segment] | None = None) -> list[float]:
        edges = self.edges() if edges is None else edges
        return [edge.length for edge in edges]

    def angles(self, edges: Sequence[Segment] | None = None) -> list[float]:
        edges = self.edges() if edges is None else edges
        return [edge.angle() for edge in edges]

    def cosines(self, edges: Sequence[Segment] | None = None) -> list[float | None]:
        """Interior angle at each vertex; index i is the turn between edges i-1 and i."""
        edges = self.edges() if edges is None else edges
        m = len(edges)
        cosines = [edges[i].cosines(edges[(i + 1) % m]) for i in range(m)]
        if cosines:
            cosines.insert(0, cosines.pop())
        return cosines

    def ratios(self, edges: Sequence[Segment] | None = None) -> list[float]:
        """Each edge length relative to the shortest edge."""
        lengths = self.lengths(edges)
        if not lengths:
            return []
        shortest = min(lengths)
        if shortest <= 0:
            return [0.0 for _ in lengths]
        return [length / shortest for length in lengths]

    def centroid(self) -> Point:
        return Point(*geo.centroid(self.to_array()))

    def bounds(self) -> tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y)."""
        return geo.bbox(self.to_array())

    def bounds_contain(self, point: PointLike) -> bool:
        """Axis-aligned bounding-box containment, edges included."""
        point = Point.coerce(point)
        min_x, min_y, max_x, max_y = self.bounds()
        return is_between(point.x, min_x, max_x) and is_between(point.y, min_y, max_y)

    def bounding_box(self) -> Rectangle:
        """Axis-aligned Rectangle around the polygon; fails for degenerate extents."""
        from shapeit.geometry.rectangle import Rectangle

        return Rectangle.from_bounds(self.bounds())

    def bounding_circle(self) -> Circle:
        center = self.centroid()
        radius = max((center.distance_to(v) for v in self._vertices), default=0.0)
        return Circle(center, radius)

    def area(self) -> float:
        return abs(geo.signed_area(self.to_array()))

    # --- Rigid transforms ---

    def scale(self, factor: float, pivot: PointLike | None = None) -> Polygon:
        pivot = self.centroid() if pivot is None else Point.coerce(pivot)
        return self._derive(
            Point((v.x - pivot.x) * factor + pivot.x, (v.y - pivot.y) * factor + pivot.y)
            for v in self._vertices
        )

    def rotate(self, radians: float, pivot: PointLike | None = None) -> Polygon:
        """Rotate counter clockwise around ``pivot`` (default: centroid)."""
        pivot = self.centroid() if pivot is None else Point.coerce(pivot)
        cos = math.cos(radians)
        sin = math.sin(radians)
        return self._derive(
            Point(
                cos * (v.x - pivot.x) - sin * (v.y - pivot.y) + pivot.x,
                sin * (v.x - pivot.x) + cos * (v.y - pivot.y) + pivot.y,
            )
            for v in self._vertices
        )

    def move_to(self, pivot: PointLike) -> Polygon:
        """Translate so the centroid lands on ``pivot``."""
        pivot = Point.coerce(pivot)
        center = self.centroid()
        dx = pivot.x - center.x
        dy = pivot.y - center.y
        return self._derive(Point(v.x + dx, v.y + dy) for v in self._vertices)

    def mirror(self, axis_angle: float = 0.0) -> Polygon:
        """Mirror relative to an axis at ``axis_angle``."""
        turned = self.rotate(axis_angle)
        flipped = self._derive(Point(v.x, -v.y) for v in turned.vertices)
        return flipped.rotate(-axis_angle)

    def is_mirror_symmetric(self, axis_angle: float = 0.0) -> bool:
        mirrored = self.mirror(axis_angle)
        if len(mirrored) != len(self):
            return False
        return all(
            math.isclose(a.x, b.x, abs_tol=_MIRROR_TOLERANCE)
            and math.isclose(a.y, b.y, abs_tol=_MIRROR_TOLERANCE)
            for a, b in zip(self._vertices, mirrored.vertices)
        )

    # --- Fitting ---

    def fit_with(self, target: Polygon, use_mirroring: bool = True) -> Polygon:
        """Place this template over ``target`` as closely as it goes.

        Rotation and scale are averaged over corresponding edges, then the
        placement with the smallest vertex distance to the target wins among
        the rotation variants, the reversed winding and, once, the mirrored
        template.
        """
        center = target.centroid()
        pairs = list(zip(target.edges(), self.edges()))

        radians = []
        scales = []
        for target_edge, self_edge in pairs:
            rad = (math.pi / 2 - target_edge.angle(self_edge)) % (math.pi / 2)
            radians.append(min(rad, math.pi / 2 - rad))
            if self_edge.length > 0:
                scales.append(target_edge.length / self_edge.length)

        radian = float(np.mean(radians)) if radians else 0.0
        scale = float(np.mean(scales)) if scales else 1.0

        forward = self._derive(self._vertices).move_to(center).scale(scale)
        backward = self._derive(reversed(self._vertices)).move_to(center).scale(scale)
        quarter = math.pi / 2

        candidates = [
            forward.rotate(radian),
            forward.rotate(-radian),
            forward.rotate(math.pi + radian),
            forward.rotate(math.pi - radian),
            backward.rotate(radian + quarter),
            backward.rotate(-radian - quarter),
            backward.rotate(math.pi - radian - quarter),
            backward.rotate(math.pi + radian + quarter),
        ]

        if use_mirroring and not self.is_mirror_symmetric():
            candidates.append(self.mirror().fit_with(target, False))

        target_arr = target.to_array()
        return min(candidates, key=lambda c: _placement_cost(c.to_array(), target_arr))

    # --- Simplification ---

    def reduce_lod(self, angle_threshold: float) -> Polygon:
        """Strip nearly straight and clustered vertices until nothing changes.

        A vertex goes when its interior angle is undefined or within
        ``angle_threshold`` of pi. Fewer than three survivors collapse the
        polygon to its first and last vertex.
        """
        polygon = Polygon(self._vertices, closed=self._closed)
        while True:
            if not polygon.vertices:
                return polygon

            cosines = polygon.cosines()
            kept = [
                vertex
                for vertex, cosine in zip(polygon.vertices, cosines)
                if cosine is not None and not is_between_threshold(cosine, math.pi, angle_threshold)
            ]

            if len(kept) < 3:
                return Polygon([polygon.vertices[0], polygon.vertices[-1]], closed=self._closed)

            min_x, min_y, max_x, max_y = polygon.bounds()
            merge_distance = min(max_x - min_x, max_y - min_y) / _MERGE_DIVISOR
            merge_distance = min(max(merge_distance, _MERGE_MIN), _MERGE_MAX)

            merged: list[Point] = []
            for vertex in kept:
                if all(vertex.distance_to(other) >= merge_distance for other in merged):
                    merged.append(vertex)

            reduced = Polygon(merged, closed=self._closed)
            if len(reduced) == len(cosines):
                return reduced
            polygon = reduced


def _placement_cost(candidate: np.ndarray, target: np.ndarray) -> float:
    """Sum over candidate vertices of the L1 distance to the nearest target vertex."""
    if len(candidate) == 0 or len(target) == 0:
        return math.inf
    diffs = np.abs(candidate[:, None, :] - target[None, :, :]).sum(axis=2)
    return float(diffs.min(axis=1).sum())
