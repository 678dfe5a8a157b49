"""Atlas: named template shapes and their cached matching features."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from shapeit.geometry import Point, PointLike, Polygon, Rectangle

logger = logging.getLogger(__name__)

SQUARE = "square"

TemplateLike = Union[Polygon, Sequence[PointLike], Mapping[str, Any]]


def coerce_template(template: TemplateLike) -> Polygon:
    """Polygon from a Polygon, a closed vertex list or a {vertices, closed} record."""
    if isinstance(template, Polygon):
        return template
    if isinstance(template, Mapping):
        if "vertices" not in template:
            raise ValueError(f"Template record needs a 'vertices' key: {template!r}")
        return Polygon(template["vertices"], closed=template.get("closed", True))
    return Polygon(template)


def _normalize(template: Polygon) -> Polygon:
    """Center on the origin and scale to a unit bounding circle."""
    centered = template.move_to(Point(0.0, 0.0))
    radius = centered.bounding_circle().r
    if radius == 0:
        return centered
    return centered.scale(1 / radius)


@dataclass(frozen=True)
class AtlasEntry:
    name: str
    template: Polygon
    cosines: tuple[float | None, ...]
    ratios: tuple[float, ...]

    @classmethod
    def from_template(cls, name: str, template: TemplateLike) -> AtlasEntry:
        polygon = _normalize(coerce_template(template))
        edges = polygon.edges()
        return cls(
            name=name,
            template=polygon,
            cosines=tuple(polygon.cosines(edges)),
            ratios=tuple(polygon.ratios(edges)),
        )

    @property
    def vertex_count(self) -> int:
        return len(self.template)


def square_entry(rotation_step: float | None = None) -> AtlasEntry:
    """The built-in unit square, carrying the rectangle rotation step."""
    return AtlasEntry.from_template(
        SQUARE, Rectangle([(0, 0), (1, 0), (1, 1), (0, 1)], rotation_step=rotation_step)
    )


class Atlas(Mapping[str, AtlasEntry]):
    """Immutable ordered mapping of template name to AtlasEntry.

    The "square" entry is always present and cannot be replaced by a
    user template.
    """

    def __init__(
        self,
        templates: Mapping[str, TemplateLike] | None = None,
        rect_rotation_step: float | None = None,
    ) -> None:
        entries = _entries_from(templates or {})
        entries[SQUARE] = square_entry(rect_rotation_step)
        self._entries = entries

    @classmethod
    def _from_entries(cls, entries: dict[str, AtlasEntry]) -> Atlas:
        atlas = cls.__new__(cls)
        atlas._entries = entries
        return atlas

    def __getitem__(self, name: str) -> AtlasEntry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Atlas({list(self._entries)})"

    def templates(self) -> dict[str, Polygon]:
        return {name: entry.template for name, entry in self._entries.items()}

    def merged(self, templates: Mapping[str, TemplateLike]) -> Atlas:
        """New atlas with ``templates`` added (same names are replaced)."""
        if not templates:
            return self
        entries = dict(self._entries)
        entries.update(_entries_from(templates))
        return Atlas._from_entries(entries)

    def with_rect_rotation(self, rotation_step: float | None) -> Atlas:
        """New atlas whose square snaps fitted rotations to ``rotation_step``."""
        entries = dict(self._entries)
        entries[SQUARE] = square_entry(rotation_step)
        return Atlas._from_entries(entries)


def _entries_from(templates: Mapping[str, TemplateLike]) -> dict[str, AtlasEntry]:
    entries: dict[str, AtlasEntry] = {}
    for name, template in templates.items():
        if name == SQUARE:
            logger.warning("Ignoring user template %r: the built-in square is kept", name)
            continue
        entries[name] = AtlasEntry.from_template(name, template)
    return entries
