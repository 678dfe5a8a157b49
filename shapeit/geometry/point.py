"""Immutable 2D point."""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from shapeit.utils.math_helpers import is_similar


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    @classmethod
    def coerce(cls, value: PointLike) -> Point:
        """Build a Point from a Point, an (x, y) pair or a record with x/y."""
        if isinstance(value, Point):
            return value
        if isinstance(value, Mapping):
            if "x" not in value or "y" not in value:
                raise ValueError(f"Point record needs 'x' and 'y' keys: {value!r}")
            return cls(float(value["x"]), float(value["y"]))
        if hasattr(value, "x") and hasattr(value, "y"):
            return cls(float(value.x), float(value.y))
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if len(value) != 2:
                raise ValueError(f"Point pair needs exactly 2 coordinates: {value!r}")
            return cls(float(value[0]), float(value[1]))
        raise ValueError(f"Cannot interpret {value!r} as a point")

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_similar(self, other: Point) -> bool:
        return is_similar(self.x, other.x) and is_similar(self.y, other.y)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


PointLike = Union[Point, Sequence[float], Mapping[str, Any]]
