"""Detection result models."""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

Coordinate = tuple[float, float]


class _Shape(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Geometry object behind the result (Circle, Segment or Polygon)
    geometry: Any = Field(default=None, exclude=True, repr=False)


class CircleShape(_Shape):
    kind: Literal["circle"] = "circle"
    center: Coordinate
    radius: float


class VectorShape(_Shape):
    kind: Literal["vector"] = "vector"
    points: tuple[Coordinate, Coordinate]


class PolygonShape(_Shape):
    """Open polyline, fallback polygon class or matched atlas template."""

    kind: str
    points: list[Coordinate] = Field(default_factory=list)


ShapeResult = Union[CircleShape, VectorShape, PolygonShape]
