"""Math helpers: CV, range tests, angle snapping. No geometry imports."""

from __future__ import annotations

import sys
from collections.abc import Sequence

import numpy as np

EPSILON = sys.float_info.epsilon


def coefficient_of_variation(values: Sequence[float]) -> float:
    """CV = std / mean (population std). Used for circularity detection."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return float("inf")
    mean = float(np.mean(arr))
    if abs(mean) < 1e-10:
        return float("inf")
    return float(np.std(arr) / mean)


def fixed_mod(a: float, b: float) -> float:
    """Modulo whose result carries the sign of the divisor."""
    return ((a % b) + b) % b


def is_between(value: float, limit1: float, limit2: float, tolerance: float = 0.0) -> bool:
    """Inclusive range test; the limits may come in either order."""
    lo, hi = (limit1, limit2) if limit1 < limit2 else (limit2, limit1)
    return lo - tolerance <= value <= hi + tolerance


def is_between_threshold(value: float, target: float, threshold: float) -> bool:
    return is_between(value, target - threshold, target + threshold)


def is_similar(a: float, b: float) -> bool:
    """Equal within one float epsilon."""
    return b - EPSILON <= a <= b + EPSILON


def snap_delta(angle: float, step: float | None) -> float:
    """Rotation that snaps ``angle`` onto the nearest multiple of ``step``.

    A residual above half a step rotates up to the next multiple, anything
    else rotates down. No step means no rotation.
    """
    if not step:
        return 0.0
    residual = fixed_mod(angle, step)
    if residual > step / 2:
        return step - residual
    return -residual
