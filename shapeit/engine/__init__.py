"""Shape detection engine."""

from shapeit.engine.atlas import SQUARE, Atlas, AtlasEntry
from shapeit.engine.config import DetectorConfig, OutputOptions, Thresholds
from shapeit.engine.context import DetectionContext
from shapeit.engine.detector import ShapeDetector, find_crossing, score_entry
from shapeit.engine.scoring import NO_MATCH, MatchScore, match_score
from shapeit.engine.templates import DEFAULT_TEMPLATES

__all__ = [
    "SQUARE",
    "Atlas",
    "AtlasEntry",
    "DetectorConfig",
    "OutputOptions",
    "Thresholds",
    "DetectionContext",
    "ShapeDetector",
    "find_crossing",
    "score_entry",
    "NO_MATCH",
    "MatchScore",
    "match_score",
    "DEFAULT_TEMPLATES",
]
