"""DetectionContext: the mutable state one detect() call threads through its stages."""

from __future__ import annotations

from dataclasses import dataclass, field

from shapeit.engine.atlas import AtlasEntry
from shapeit.engine.scoring import MatchScore
from shapeit.geometry import Point, Polygon


@dataclass
class DetectionContext:
    # Working vertex list; self-intersection resolution splices it in place
    points: list[Point]
    # Closed loops cut off by self-intersections (or the closed stroke itself)
    loops: list[Polygon] = field(default_factory=list)
    # Number of crossings found, including those whose loop was too small
    crossings: int = 0
    # Polygon the circle test and reduction run on
    candidate: Polygon | None = None
    # Candidate after level-of-detail reduction
    reduced: Polygon | None = None
    # Best atlas entry and its score
    match: AtlasEntry | None = None
    score: MatchScore | None = None

    @property
    def num_points(self) -> int:
        return len(self.points)

    @property
    def closed(self) -> bool:
        """Did the stroke produce at least one closed loop."""
        return bool(self.loops)
