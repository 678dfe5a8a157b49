"""Cyclic feature matching between two closed-shape feature sequences."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class MatchScore:
    """Similarity in [0, 1] and the cyclic offset that achieved it."""

    score: float
    offset: int | None = None

    def __float__(self) -> float:
        return self.score


NO_MATCH = MatchScore(0.0, None)


def _as_features(values: Sequence[float | None]) -> np.ndarray:
    return np.array([np.nan if v is None else v for v in values], dtype=np.float64)


def match_score(
    dst: Sequence[float | None],
    src: Sequence[float | None],
    offsets: Iterable[int] | None = None,
) -> MatchScore:
    """Best average min/max ratio over cyclic rotations of ``src``.

    ``src`` is rotated left by each offset (all of them by default) and
    compared position by position with ``dst``. Undefined values score 0.
    The earliest offset wins ties.
    """
    if len(dst) != len(src) or len(src) == 0:
        return NO_MATCH

    d = _as_features(dst)
    s = _as_features(src)
    offsets = range(len(s)) if offsets is None else offsets

    best = NO_MATCH
    for offset in offsets:
        if offset is None:
            continue
        rolled = np.roll(s, -offset)
        with np.errstate(divide="ignore", invalid="ignore"):
            ratios = np.where(d == rolled, 1.0, np.minimum(d, rolled) / np.maximum(d, rolled))
        ratios = np.nan_to_num(ratios, nan=0.0, posinf=0.0, neginf=0.0)
        score = float(np.mean(ratios))
        if best.offset is None or score > best.score:
            best = MatchScore(score, int(offset) % len(s))
    return best
