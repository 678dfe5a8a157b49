"""Geometric primitives: points, segments, circles, polygons and rectangles."""

from shapeit.geometry.point import Point, PointLike
from shapeit.geometry.segment import Segment
from shapeit.geometry.circle import Circle
from shapeit.geometry.polygon import Polygon
from shapeit.geometry.rectangle import Rectangle
from shapeit.geometry.intersections import Curve, intersect

__all__ = [
    "Point",
    "PointLike",
    "Segment",
    "Circle",
    "Polygon",
    "Rectangle",
    "Curve",
    "intersect",
]
