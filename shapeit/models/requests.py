"""Input models for strokes read from JSON."""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, Field

from shapeit.models.shapes import Coordinate


class PointRecord(BaseModel):
    x: float
    y: float


class StrokeRequest(BaseModel):
    points: list[Union[Coordinate, PointRecord]] = Field(
        ..., min_length=2, description="Drawn points, in drawing order"
    )
    atlas: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra templates: name -> vertex list or {vertices, closed}",
    )
    thresholds: dict[str, float] = Field(default_factory=dict)
    output: dict[str, float | None] = Field(default_factory=dict)

    def coordinates(self) -> list[Coordinate]:
        return [(p.x, p.y) if isinstance(p, PointRecord) else p for p in self.points]
