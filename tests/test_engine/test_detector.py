"""Tests for ShapeDetector, end to end and stage by stage."""

import math

import pytest

import shapeit
from shapeit.engine import SQUARE, ShapeDetector, find_crossing, score_entry
from shapeit.engine.atlas import AtlasEntry
from shapeit.geometry import Point, Polygon, Segment
from shapeit.models.shapes import CircleShape, PolygonShape, VectorShape
from tests.conftest import (
    CIRCLE_CENTER,
    CIRCLE_RADIUS,
    CIRCLE_STROKE,
    L_STROKE,
    RECTANGLE_STROKE,
    TRIANGLE_CORNERS,
    TRIANGLE_STROKE,
    TRIANGLE_TEMPLATE,
    VECTOR_STROKE,
    VECTOR_Y,
    sorted_points,
    transformed,
)


def _along(start, toward, distance):
    """Point ``distance`` from ``start`` in the direction of ``toward``."""
    length = start.distance_to(toward)
    return Point(
        start.x + (toward.x - start.x) * distance / length,
        start.y + (toward.y - start.y) * distance / length,
    )


# --- End to end ---


def test_detects_circle(detector):
    shape = detector.detect(CIRCLE_STROKE)
    assert isinstance(shape, CircleShape)
    assert shape.kind == "circle"
    assert shape.center[0] == pytest.approx(CIRCLE_CENTER[0], abs=5)
    assert shape.center[1] == pytest.approx(CIRCLE_CENTER[1], abs=5)
    assert shape.radius == pytest.approx(CIRCLE_RADIUS, abs=5)


def test_detects_rectangle(detector):
    shape = detector.detect(RECTANGLE_STROKE)
    assert isinstance(shape, PolygonShape)
    assert shape.kind == "rectangle"
    assert sorted_points(shape.points) == sorted_points(RECTANGLE_STROKE)


def test_detects_rectangle_drawn_back_to_start(detector):
    shape = detector.detect(RECTANGLE_STROKE + [(0.0, 0.0)])
    assert shape.kind == "rectangle"
    assert sorted_points(shape.points) == sorted_points(RECTANGLE_STROKE)


def test_detects_vector(detector):
    shape = detector.detect(VECTOR_STROKE)
    assert isinstance(shape, VectorShape)
    assert shape.kind == "vector"
    assert shape.points[0] == pytest.approx((0.0, VECTOR_Y))
    assert shape.points[1] == pytest.approx((300.0, VECTOR_Y))


def test_detects_template_from_atlas(triangle_detector):
    shape = triangle_detector.detect(TRIANGLE_STROKE)
    assert shape.kind == "equilateral"
    assert len(shape.points) == 3
    for vertex in TRIANGLE_STROKE:
        nearest = min(math.dist(vertex, p) for p in shape.points)
        assert nearest < 5


def test_triangle_without_template_falls_back_to_vertex_count(detector):
    shape = detector.detect(TRIANGLE_STROKE)
    assert shape.kind == "triangle"
    assert len(shape.points) == 3


def test_triangle_ending_near_its_start(triangle_detector):
    start = TRIANGLE_CORNERS[0]
    shape = triangle_detector.detect(TRIANGLE_CORNERS + [(start[0] + 2.0, start[1] - 1.0)])
    assert shape.kind == "equilateral"
    assert len(shape.points) == 3


def test_triangle_with_tails_is_not_a_circle(triangle_detector):
    a, b, c = (Point(*p) for p in TRIANGLE_CORNERS)
    lead = _along(a, b, -15.0)
    past = _along(a, c, -20.0)
    shape = triangle_detector.detect([lead, a, b, c, past])
    assert shape.kind == "equilateral"
    assert len(shape.points) == 3


def test_square_is_matched(detector):
    stroke = transformed([(0, 0), (1, 0), (1, 1), (0, 1)], scale=120, rotation=0.3, offset=(50, 50))
    stroke.append(stroke[0])
    shape = detector.detect(stroke)
    assert shape.kind == SQUARE
    assert len(shape.points) == 4


def test_skewed_quad_is_quadrilateral(detector):
    shape = detector.detect([(0, 0), (200, 0), (260, 120), (30, 100)])
    assert shape.kind == "quadrilateral"


@pytest.mark.parametrize("n,kind", [(5, "pentagon"), (6, "hexagon"), (8, "octagon")])
def test_regular_polygons_without_templates(detector, n, kind):
    stroke = [
        (200 + 150 * math.cos(2 * math.pi * k / n), 200 + 150 * math.sin(2 * math.pi * k / n))
        for k in range(n)
    ]
    stroke.append(stroke[0])
    shape = detector.detect(stroke)
    assert shape.kind == kind
    assert len(shape.points) == n


OPEN_STROKES = {
    "L": L_STROKE,
    "U": [(0.0, 100.0), (0.0, 0.0), (100.0, 0.0), (100.0, 100.0)],
    "W": [(0.0, 0.0), (50.0, 80.0), (100.0, 0.0), (150.0, 80.0), (200.0, 0.0)],
    "V": TRIANGLE_CORNERS,
}


@pytest.mark.parametrize("name", sorted(OPEN_STROKES))
def test_open_strokes_stay_open(detector, name):
    stroke = OPEN_STROKES[name]
    shape = detector.detect(stroke)
    assert shape.kind == "open-polygon"
    assert sorted_points(shape.points) == sorted_points(stroke)


def test_two_points_are_a_vector(detector):
    shape = detector.detect([(0, 0), (30, 40)])
    assert shape.kind == "vector"
    assert shape.points == ((0.0, 0.0), (30.0, 40.0))


def test_vector_rotation_is_snapped():
    detector = ShapeDetector(output={"vectorRotationStep": math.pi / 4})
    shape = detector.detect([(0, 0), (100, 8)])
    start, end = (Point(*p) for p in shape.points)
    assert Segment(start, end).angle() == pytest.approx(0, abs=1e-9)
    assert end == Point(100, 8)


def test_accepts_point_records(detector):
    shape = detector.detect([{"x": x, "y": y} for x, y in RECTANGLE_STROKE])
    assert shape.kind == "rectangle"


def test_consecutive_duplicates_are_ignored(detector):
    stroke = [RECTANGLE_STROKE[0]] * 3 + RECTANGLE_STROKE[1:]
    assert detector.detect(stroke).kind == "rectangle"


def test_too_few_points_raise(detector):
    with pytest.raises(ValueError):
        detector.detect([(1, 1)])
    with pytest.raises(ValueError):
        detector.detect([])


def test_result_serializes_without_geometry(detector):
    dumped = detector.detect(CIRCLE_STROKE).model_dump(mode="json")
    assert set(dumped) == {"kind", "center", "radius"}
    assert detector.detect(RECTANGLE_STROKE).geometry is not None


def test_callable_and_module_level_detect(detector):
    assert detector(VECTOR_STROKE).kind == "vector"
    assert shapeit.detect(VECTOR_STROKE).kind == "vector"
    assert shapeit.default_detector() is shapeit.default_detector()


# --- Configuration ---


def test_modify_returns_detector_and_merges(detector):
    assert detector.modify(thresholds={"minPolygonArea": 50}) is detector
    assert detector.thresholds.min_polygon_area == 50
    assert detector.thresholds.normal_distance == 90

    detector.modify(atlas={"triangle": TRIANGLE_TEMPLATE})
    assert set(detector.atlas) == {SQUARE, "triangle"}
    assert detector.get_config()["thresholds"]["minPolygonArea"] == 50


def test_detectors_do_not_share_config():
    a = ShapeDetector()
    b = ShapeDetector()
    a.modify(thresholds={"minSquareScore": 0.5}, atlas={"triangle": TRIANGLE_TEMPLATE})
    assert b.thresholds.min_square_score == 0.85
    assert "triangle" not in b.atlas


def test_rect_rotation_step_applies_to_rectangles():
    detector = ShapeDetector(output={"rectRotationStep": math.pi / 2})
    tilted = transformed(RECTANGLE_STROKE, rotation=0.1, offset=(100, 100))
    shape = detector.detect(tilted)
    assert shape.kind == "rectangle"
    xs = sorted({round(x, 6) for x, _ in shape.points})
    assert len(xs) == 2


def test_min_polygon_area_rejects_small_loops():
    detector = ShapeDetector(thresholds={"minPolygonArea": 1e6})
    shape = detector.detect(RECTANGLE_STROKE)
    assert shape.kind == "open-polygon"


# --- Stages ---


def test_find_crossing_reports_earlier_edge():
    points = [Point(0, 0), Point(100, 0), Point(100, 100), Point(50, -50)]
    hit = find_crossing(points, 2, 90, 0.3)
    assert hit is not None
    j, crossing = hit
    assert j == 0
    assert crossing.x == pytest.approx(200 / 3)
    assert crossing.y == pytest.approx(0)


def test_find_crossing_skips_parallel_edges():
    points = [Point(0, 0), Point(100, 0), Point(100, 10), Point(0, 10)]
    assert find_crossing(points, 2, 90, 0.3) is None


def test_find_crossing_extends_stroke_ends():
    # The last edge stops short of the first one; extending it closes the gap
    points = [Point(0, 0), Point(100, 0), Point(100, 60), Point(40, 60), Point(40, 20)]
    assert find_crossing(points, 3, 0, 0.3) is None
    j, crossing = find_crossing(points, 3, 90, 0.3)
    assert j == 0
    assert crossing.x == pytest.approx(40)
    assert crossing.y == pytest.approx(0)


def test_score_entry_for_identical_shape():
    entry = AtlasEntry.from_template("tri", TRIANGLE_TEMPLATE)
    candidate = Polygon(transformed(TRIANGLE_TEMPLATE, scale=100, rotation=1.0))
    edges = candidate.edges()
    score = score_entry(entry, candidate.cosines(edges), candidate.ratios(edges))
    assert score.score == pytest.approx(1.0)
    assert score.offset is not None


def test_score_entry_vertex_count_mismatch():
    entry = AtlasEntry.from_template("tri", TRIANGLE_TEMPLATE)
    square = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
    assert score_entry(entry, square.cosines(), square.ratios()).offset is None


def test_rectangle_does_not_pass_as_square():
    entry = AtlasEntry.from_template(SQUARE, [(0, 0), (1, 0), (1, 1), (0, 1)])
    rect = Polygon(RECTANGLE_STROKE)
    score = score_entry(entry, rect.cosines(), rect.ratios())
    assert score.score == pytest.approx(0.8)


# --- Self-intersection loops ---

# A 15x30 loop, then a 100x160 loop closed by the final downstroke
TWO_LOOP_STROKE = [
    (0, 0), (30, 0), (30, 30), (15, 30), (15, -40),
    (200, -40), (200, 120), (100, 120), (100, -60),
]


def test_largest_loop_is_the_candidate(detector):
    shape = detector.detect(TWO_LOOP_STROKE)
    assert shape.kind == "rectangle"
    assert sorted_points(shape.points) == [(100, -40), (100, 120), (200, -40), (200, 120)]


def test_small_loop_is_dropped_but_cut_off():
    detector = ShapeDetector(thresholds={"minPolygonArea": 1000})
    shape = detector.detect([(0, 0), (30, 0), (30, 30), (15, 30), (15, -100)])
    assert shape.kind == "vector"
    start, end = shape.points
    assert start == pytest.approx((15, 0))
    assert end == pytest.approx((15, -100))


def test_small_loop_is_kept_above_min_area(detector):
    shape = detector.detect([(0, 0), (30, 0), (30, 30), (15, 30), (15, -100)])
    assert shape.kind == "rectangle"
    assert sorted_points(shape.points) == [(15, 0), (15, 30), (30, 0), (30, 30)]


def test_rectangle_with_lead_in_and_overshoot(detector):
    shape = detector.detect([(-20, 0), (100, 0), (100, 60), (0, 60), (0, -25)])
    assert shape.kind == "rectangle"
    assert sorted_points(shape.points) == sorted_points(RECTANGLE_STROKE)
