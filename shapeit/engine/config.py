"""Detector configuration: thresholds, output options and the atlas they travel with."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shapeit.engine.atlas import Atlas, TemplateLike

_M = TypeVar("_M", bound="_Options")


class _Options(BaseModel):
    """Frozen option block that accepts snake_case or camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    def merged(self: _M, partial: Union[_M, Mapping[str, Any], None]) -> _M:
        """Copy with the explicitly provided fields of ``partial`` overwritten."""
        if partial is None:
            return self
        if not isinstance(partial, type(self)):
            partial = type(self).model_validate(partial)
        return self.model_copy(update=partial.model_dump(exclude_unset=True))


class Thresholds(_Options):
    """Numeric knobs of the detection pipeline."""

    # Max gap between first and last point for a stroke to pass as a circle
    circle_closure_distance: float = Field(default=100, ge=0)
    # Reduction angle used to check that a circle candidate has no real corners
    circle_reduction_angle: float = Field(default=0.6, ge=0)
    # Loops cut off by a self-intersection must enclose more than this
    min_polygon_area: float = Field(default=300, ge=0)
    # Base of the vertex-count dependent acceptance threshold
    min_shape_score: float = Field(default=0.83, ge=0, le=1)
    # Acceptance threshold for the square template and right-angle checks
    min_square_score: float = Field(default=0.85, ge=0, le=1)
    # Reach the first and last stroke edges are extended to
    normal_distance: float = Field(default=90, ge=0)
    # Max radius std/mean ratio of a circle
    radiuses_std_ratio: float = Field(default=0.18, ge=0)
    # Straightness tolerance of the general vertex reduction
    vectors_reduction_angle: float = Field(default=0.3, ge=0)
    # Max closing gap, as a share of the stroke path length, of a closed stroke
    stroke_closure_ratio: float = Field(default=0.25, ge=0)


class OutputOptions(_Options):
    """Rotation quantization applied to detected vectors and rectangles."""

    vector_rotation_step: float | None = Field(default=None, gt=0)
    rect_rotation_step: float | None = Field(default=None, gt=0)


@dataclass(frozen=True)
class DetectorConfig:
    """Everything one detector reads on each call. Replaced, never mutated."""

    atlas: Atlas = field(default_factory=Atlas)
    thresholds: Thresholds = field(default_factory=Thresholds)
    output: OutputOptions = field(default_factory=OutputOptions)

    @classmethod
    def build(
        cls,
        atlas: Mapping[str, TemplateLike] | None = None,
        thresholds: Thresholds | Mapping[str, Any] | None = None,
        output: OutputOptions | Mapping[str, Any] | None = None,
    ) -> DetectorConfig:
        out = OutputOptions().merged(output)
        return cls(
            atlas=Atlas(atlas or {}, rect_rotation_step=out.rect_rotation_step),
            thresholds=Thresholds().merged(thresholds),
            output=out,
        )

    def merged(
        self,
        atlas: Mapping[str, TemplateLike] | None = None,
        thresholds: Thresholds | Mapping[str, Any] | None = None,
        output: OutputOptions | Mapping[str, Any] | None = None,
    ) -> DetectorConfig:
        """New config with extra atlas entries and overwritten option fields."""
        out = self.output.merged(output)
        new_atlas = self.atlas.merged(atlas or {})
        if out.rect_rotation_step != self.output.rect_rotation_step:
            new_atlas = new_atlas.with_rect_rotation(out.rect_rotation_step)
        return DetectorConfig(
            atlas=new_atlas,
            thresholds=self.thresholds.merged(thresholds),
            output=out,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "atlas": {name: entry.template.to_points() for name, entry in self.atlas.items()},
            "thresholds": self.thresholds.model_dump(by_alias=True),
            "output": self.output.model_dump(by_alias=True),
        }
