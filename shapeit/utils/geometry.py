"""Leaf-node geometry helpers over Nx2 arrays. No shapeit.geometry imports."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
from numpy.typing import NDArray


def as_array(points: Iterable[Iterable[float]]) -> NDArray[np.float64]:
    """Stack point-likes (Points, pairs) into an Nx2 float array."""
    arr = np.array([tuple(p) for p in points], dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 2))
    return arr


def signed_area(points: NDArray[np.float64]) -> float:
    """Shoelace formula over the implicitly closed ring. Positive = CCW."""
    if len(points) < 3:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return float(0.5 * np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def bbox(points: NDArray[np.float64]) -> tuple[float, float, float, float]:
    """Compute (xmin, ymin, xmax, ymax) bounding box."""
    if len(points) == 0:
        return (0.0, 0.0, 0.0, 0.0)
    return (
        float(np.min(points[:, 0])),
        float(np.min(points[:, 1])),
        float(np.max(points[:, 0])),
        float(np.max(points[:, 1])),
    )


def centroid(points: NDArray[np.float64]) -> tuple[float, float]:
    """Area-weighted polygon centroid.

    Collinear rings (zero accumulated area) fall back to the plain mean of
    the vertices.
    """
    if len(points) == 0:
        return (0.0, 0.0)
    x = points[:, 0]
    y = points[:, 1]
    nx = np.roll(x, -1)
    ny = np.roll(y, -1)
    cross = x * ny - nx * y
    area_sum = float(np.sum(cross))
    if area_sum == 0:
        return (float(np.mean(x)), float(np.mean(y)))
    factor = area_sum * 3
    return (
        float(np.sum((x + nx) * cross) / factor),
        float(np.sum((y + ny) * cross) / factor),
    )


def centroid_distances(
    points: NDArray[np.float64], center: tuple[float, float]
) -> NDArray[np.float64]:
    """Distance from ``center`` to each point."""
    cx, cy = center
    return np.sqrt((points[:, 0] - cx) ** 2 + (points[:, 1] - cy) ** 2)


def path_length(points: NDArray[np.float64]) -> float:
    """Length of the open polyline through the points."""
    if len(points) < 2:
        return 0.0
    diffs = np.diff(points, axis=0)
    return float(np.sum(np.sqrt(np.sum(diffs**2, axis=1))))
