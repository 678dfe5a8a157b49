"""Pairwise intersection dispatch between curve types."""

from __future__ import annotations

from collections.abc import Callable
from typing import Union

from shapeit.geometry.circle import Circle
from shapeit.geometry.point import Point
from shapeit.geometry.segment import Segment

Curve = Union[Segment, Circle]


def _segment_segment(a: Segment, b: Segment) -> list[Point]:
    point = a.intersection(b)
    return [] if point is None else [point]


_DISPATCH: dict[tuple[type, type], Callable[[Curve, Curve], list[Point]]] = {
    (Segment, Segment): _segment_segment,
    (Segment, Circle): lambda a, b: b.segment_intersections(a),
    (Circle, Segment): lambda a, b: a.segment_intersections(b),
    (Circle, Circle): lambda a, b: a.circle_intersections(b),
}


def intersect(a: Curve, b: Curve) -> list[Point]:
    """All intersection points of two curves (empty when there are none)."""
    try:
        handler = _DISPATCH[(type(a), type(b))]
    except KeyError:
        raise TypeError(
            f"No intersection rule for {type(a).__name__} and {type(b).__name__}"
        ) from None
    return handler(a, b)
