"""ShapeDetector: turns a freehand stroke into a circle, vector or polygon.

Stages of one detect() call:
  1. resolve self-intersections, cutting closed loops off the stroke
  2. pick the candidate (largest loop, the closed stroke, or the raw stroke)
  3. circle test
  4. level-of-detail reduction
  5. open strokes and degenerate candidates become vectors or open polygons
  6. score the candidate against every atlas template
  7. fit the best template if it passes the acceptance threshold
  8. otherwise classify by vertex count (with rectangle detection)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import numpy as np

from shapeit.engine.atlas import SQUARE, Atlas, AtlasEntry, TemplateLike
from shapeit.engine.config import DetectorConfig, OutputOptions, Thresholds
from shapeit.engine.context import DetectionContext
from shapeit.engine.scoring import NO_MATCH, MatchScore, match_score
from shapeit.geometry import Circle, Point, PointLike, Polygon, Rectangle, Segment
from shapeit.models.shapes import CircleShape, PolygonShape, ShapeResult, VectorShape
from shapeit.utils.geometry import as_array, centroid_distances, path_length
from shapeit.utils.math_helpers import coefficient_of_variation, is_between_threshold

logger = logging.getLogger(__name__)

OPEN_POLYGON = "open-polygon"
RECTANGLE = "rectangle"
QUADRILATERAL = "quadrilateral"
POLYGON = "polygon"

_NAMES_BY_VERTEX_COUNT = {3: "triangle", 5: "pentagon", 6: "hexagon", 8: "octagon"}
_RIGHT_ANGLES = [math.pi / 2] * 4


def find_crossing(
    points: Sequence[Point],
    i: int,
    normal_distance: float,
    parallel_threshold: float,
) -> tuple[int, Point] | None:
    """First earlier, non-adjacent edge j that edge i crosses.

    The stroke's last edge is extended forward and its first edge backward
    to ``normal_distance`` so near misses at the stroke ends still count.
    Edge pairs within ``parallel_threshold`` of parallel are skipped.
    """
    edge = Segment(points[i], points[i + 1])
    if i == len(points) - 2:
        edge = edge.normalize_length(normal_distance, points[i])

    for j in range(i - 1):
        other = Segment(points[j], points[j + 1])
        if j == 0:
            other = other.normalize_length(normal_distance, points[1])

        angle = abs(edge.angle(other))
        if is_between_threshold(angle, 0, parallel_threshold) or is_between_threshold(
            angle, math.pi, parallel_threshold
        ):
            continue

        crossing = other.intersection(edge)
        if crossing is not None:
            return j, crossing
    return None


def score_entry(
    entry: AtlasEntry, cosines: Sequence[float | None], ratios: Sequence[float]
) -> MatchScore:
    """Product of the angle and edge-ratio similarities.

    The alignment offset comes from the better of the two cross-checks,
    each scoring one feature at the other feature's best offset.
    """
    by_cosines = match_score(entry.cosines, cosines)
    by_ratios = match_score(entry.ratios, ratios)
    if by_cosines.offset is None or by_ratios.offset is None:
        return NO_MATCH

    cross_check = max(
        match_score(entry.cosines, cosines, [by_ratios.offset]),
        match_score(entry.ratios, ratios, [by_cosines.offset]),
        key=lambda s: s.score,
    )
    return MatchScore(by_cosines.score * by_ratios.score, cross_check.offset)


def _dedupe_consecutive(points: Iterable[Point]) -> list[Point]:
    result: list[Point] = []
    for point in points:
        if result and point.is_similar(result[-1]):
            continue
        result.append(point)
    return result


def _rotate_left(polygon: Polygon, offset: int) -> Polygon:
    vertices = polygon.vertices
    return Polygon(vertices[offset:] + vertices[:offset], closed=polygon.closed)


class ShapeDetector:
    """Detects the shape a freehand stroke was meant to be.

    Owns its configuration; ``modify`` swaps in a new one. Do not call
    ``modify`` while another thread is inside ``detect``.
    """

    def __init__(
        self,
        atlas: Mapping[str, TemplateLike] | None = None,
        thresholds: Thresholds | Mapping[str, Any] | None = None,
        output: OutputOptions | Mapping[str, Any] | None = None,
    ) -> None:
        self._config = DetectorConfig.build(atlas, thresholds, output)

    # --- Configuration ---

    @property
    def config(self) -> DetectorConfig:
        return self._config

    @property
    def atlas(self) -> Atlas:
        return self._config.atlas

    @property
    def thresholds(self) -> Thresholds:
        return self._config.thresholds

    @property
    def output(self) -> OutputOptions:
        return self._config.output

    def get_config(self) -> dict[str, Any]:
        return self._config.to_dict()

    def modify(
        self,
        atlas: Mapping[str, TemplateLike] | None = None,
        thresholds: Thresholds | Mapping[str, Any] | None = None,
        output: OutputOptions | Mapping[str, Any] | None = None,
    ) -> ShapeDetector:
        """Add atlas templates and overwrite the given threshold/output fields."""
        self._config = self._config.merged(atlas, thresholds, output)
        logger.info(
            "Detector config updated: %d templates, thresholds=%s, output=%s",
            len(self._config.atlas),
            self._config.thresholds.model_dump(),
            self._config.output.model_dump(),
        )
        return self

    # --- Detection ---

    def __call__(self, points: Iterable[PointLike]) -> ShapeResult:
        return self.detect(points)

    def detect(self, points: Iterable[PointLike]) -> ShapeResult:
        config = self._config
        t = config.thresholds

        raw = [Point.coerce(p) for p in points]
        if len(raw) < 2:
            raise ValueError(f"At least 2 points are needed to detect a shape, got {len(raw)}")

        ctx = DetectionContext(points=_dedupe_consecutive(raw))

        self._resolve_intersections(ctx, t)
        self._close_stroke(ctx, t)

        if ctx.loops:
            ctx.candidate = max(ctx.loops, key=lambda loop: loop.area())
        else:
            ctx.candidate = Polygon(ctx.points)

        circle = self._try_circle(ctx.candidate, t)
        if circle is not None:
            return self._done(circle, ctx)

        ctx.reduced = ctx.candidate.reduce_lod(t.vectors_reduction_angle)

        if len(ctx.reduced) < 3 or not ctx.closed:
            return self._done(self._open_shape(ctx, config.output), ctx)

        ctx.match, ctx.score = self._match_atlas(ctx.reduced, config.atlas)
        aligned = ctx.reduced
        if ctx.score.offset:
            aligned = _rotate_left(aligned, ctx.score.offset)

        n = len(aligned)
        if ctx.match is not None:
            if ctx.match.name == SQUARE:
                threshold = t.min_square_score
            else:
                threshold = math.sin(math.pi / 2 * t.min_shape_score**n)
            if ctx.score.score > threshold:
                fitted = ctx.match.template.fit_with(aligned)
                shape = PolygonShape(
                    kind=ctx.match.name, points=fitted.to_points(), geometry=fitted
                )
                return self._done(shape, ctx)
            logger.debug(
                "Best template %r scored %.3f, below %.3f",
                ctx.match.name,
                ctx.score.score,
                threshold,
            )

        if n == 4:
            return self._done(self._classify_quad(aligned, t, config.output), ctx)
        kind = _NAMES_BY_VERTEX_COUNT.get(n, POLYGON)
        return self._done(PolygonShape(kind=kind, points=aligned.to_points(), geometry=aligned), ctx)

    def _done(self, shape: ShapeResult, ctx: DetectionContext) -> ShapeResult:
        logger.debug(
            "Detected %s from %d points (%d crossings, %d loops)",
            shape.kind,
            ctx.num_points,
            ctx.crossings,
            len(ctx.loops),
        )
        return shape

    # --- Stages ---

    def _resolve_intersections(self, ctx: DetectionContext, t: Thresholds) -> None:
        """Cut closed loops off the stroke where it crosses itself.

        Each crossing replaces the run of points it encloses; the scan
        resumes right after the earlier edge.
        """
        i = 2
        while i < len(ctx.points) - 1:
            hit = find_crossing(ctx.points, i, t.normal_distance, t.vectors_reduction_angle)
            if hit is None:
                i += 1
                continue

            j, crossing = hit
            ctx.crossings += 1
            loop = Polygon(ctx.points[j + 1 : i + 1] + [crossing])
            area = loop.area()
            if area > t.min_polygon_area:
                ctx.loops.append(loop)
            logger.debug(
                "Edges %d and %d cross at (%.1f, %.1f), loop area %.1f", j, i, crossing.x, crossing.y, area
            )

            ctx.points = ctx.points[:j] + [crossing] + ctx.points[i + 1 :]
            i = j + 1

    def _close_stroke(self, ctx: DetectionContext, t: Thresholds) -> None:
        """Treat a stroke that ends near where it started as a closed loop.

        The closing gap must be a small share of the drawn path and no longer
        than the longest drawn edge.
        """
        if ctx.loops or len(ctx.points) < 3:
            return
        length = path_length(as_array(ctx.points))
        gap = ctx.points[0].distance_to(ctx.points[-1])
        longest = max(a.distance_to(b) for a, b in zip(ctx.points, ctx.points[1:]))
        if length == 0 or gap > t.stroke_closure_ratio * length or gap > longest:
            return
        loop = Polygon(ctx.points)
        if loop.area() > t.min_polygon_area:
            ctx.loops.append(loop)

    def _try_circle(self, polygon: Polygon, t: Thresholds) -> CircleShape | None:
        if len(polygon) < 3:
            return None

        # A circle collapses to its two ends under the coarse reduction;
        # three or more surviving corners make it a polygon
        coarse = polygon.reduce_lod(t.circle_reduction_angle)
        if len(coarse) >= 3:
            return None

        vertices = polygon.vertices
        if vertices[0].distance_to(vertices[-1]) > t.circle_closure_distance:
            return None

        center = polygon.centroid()
        radii = centroid_distances(polygon.to_array(), center.as_tuple())
        if coefficient_of_variation(radii) >= t.radiuses_std_ratio:
            return None

        circle = Circle(center, float(np.mean(radii)))
        return CircleShape(center=center.as_tuple(), radius=circle.r, geometry=circle)

    def _open_shape(self, ctx: DetectionContext, output: OutputOptions) -> ShapeResult:
        # The closing edge is not part of what was drawn
        edges = ctx.reduced.edges()[:-1]
        if not edges:
            vertices = ctx.candidate.vertices
            edges = [Segment(vertices[0], vertices[-1])]

        if len(edges) == 1:
            vector = Segment(edges[0].p1, edges[0].p2, output.vector_rotation_step).round_angle()
            return VectorShape(points=(vector.p1.as_tuple(), vector.p2.as_tuple()), geometry=vector)

        polyline = Polygon([p for edge in edges for p in edge.vertices], closed=False)
        return PolygonShape(kind=OPEN_POLYGON, points=polyline.to_points(), geometry=polyline)

    def _match_atlas(
        self, polygon: Polygon, atlas: Atlas
    ) -> tuple[AtlasEntry | None, MatchScore]:
        edges = polygon.edges()
        cosines = polygon.cosines(edges)
        ratios = polygon.ratios(edges)

        best_entry: AtlasEntry | None = None
        best = NO_MATCH
        for entry in atlas.values():
            score = score_entry(entry, cosines, ratios)
            logger.debug("Template %r: score %.3f offset %s", entry.name, score.score, score.offset)
            if best_entry is None or score.score > best.score:
                best_entry, best = entry, score
        return best_entry, best

    def _classify_quad(
        self, polygon: Polygon, t: Thresholds, output: OutputOptions
    ) -> PolygonShape:
        right_angles = match_score(polygon.cosines(), _RIGHT_ANGLES)
        if right_angles.score <= t.min_square_score:
            return PolygonShape(kind=QUADRILATERAL, points=polygon.to_points(), geometry=polygon)

        lengths = polygon.lengths()
        vertical = (lengths[0] + lengths[2]) / 2
        horizontal = (lengths[1] + lengths[3]) / 2
        ideal = Rectangle(
            [(0, vertical), (0, 0), (horizontal, 0), (horizontal, vertical)],
            rotation_step=output.rect_rotation_step,
        )
        fitted = ideal.fit_with(polygon)
        return PolygonShape(kind=RECTANGLE, points=fitted.to_points(), geometry=fitted)
