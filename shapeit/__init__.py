"""shapeit: recognize circles, vectors and polygons in freehand strokes."""

from __future__ import annotations

from collections.abc import Iterable

from shapeit.engine import DEFAULT_TEMPLATES, ShapeDetector
from shapeit.geometry import Circle, Point, PointLike, Polygon, Rectangle, Segment
from shapeit.models.shapes import CircleShape, PolygonShape, ShapeResult, VectorShape

__version__ = "0.1.0"

_default_detector: ShapeDetector | None = None


def default_detector() -> ShapeDetector:
    """Shared detector with the built-in atlas, created on first use."""
    global _default_detector
    if _default_detector is None:
        _default_detector = ShapeDetector()
    return _default_detector


def detect(points: Iterable[PointLike]) -> ShapeResult:
    return default_detector().detect(points)


__all__ = [
    "DEFAULT_TEMPLATES",
    "ShapeDetector",
    "Circle",
    "Point",
    "PointLike",
    "Polygon",
    "Rectangle",
    "Segment",
    "CircleShape",
    "PolygonShape",
    "ShapeResult",
    "VectorShape",
    "default_detector",
    "detect",
]
